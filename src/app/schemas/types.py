"""Annotated field types for monetary and hour inputs.

Amounts arrive as decimal strings in major units ("650.00") and are converted to
integer cents here. Floats are rejected so no binary rounding reaches storage.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

from src.app.core.money import parse_hours, parse_money_to_cents


def _reject_float(value: Any, field: str) -> Any:
    if isinstance(value, float):
        raise ValueError(f"{field} must be sent as a decimal string, e.g. \"12.50\"")
    return value


def _to_cents(value: Any) -> int:
    return parse_money_to_cents(_reject_float(value, "amount"))


def _to_hours(value: Any) -> Decimal:
    return parse_hours(_reject_float(value, "hours"))


# Request fields
MoneyInput = Annotated[int, BeforeValidator(_to_cents)]
HoursInput = Annotated[Decimal, BeforeValidator(_to_hours)]

# Response fields: hours as a fixed two-decimal string
HoursOutput = Annotated[Decimal, PlainSerializer(lambda v: f"{v:.2f}", return_type=str)]
