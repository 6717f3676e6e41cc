"""Money and hours parsing.

Monetary input arrives as decimal strings and is converted to integer cents at the
API boundary. Floats are never used for money.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
HOUR_PRECISION = Decimal("0.01")
MAX_CENTS = 100_000_000_00  # 100M in major units
MAX_AMOUNT = Decimal(MAX_CENTS) / 100
MAX_HOURS = Decimal("10000")


def _parse_decimal(value: str | int | Decimal, field: str, limit: Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a decimal number")
    try:
        amount = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{field} must be a decimal number") from e
    if not amount.is_finite():
        raise ValueError(f"{field} must be a finite number")
    if amount < 0:
        raise ValueError(f"{field} cannot be negative")
    # Checked before quantizing: huge exponents overflow the decimal context
    if amount > limit:
        raise ValueError(f"{field} is too large")
    return amount


def parse_money_to_cents(value: str | int | Decimal, field: str = "amount") -> int:
    """Parse a decimal amount in major units ("123.45") into integer cents.

    Rounds half-up to the nearest cent.

    Raises:
        ValueError: If the value is not a finite, non-negative decimal of at most
            ``MAX_CENTS`` cents.
    """
    amount = _parse_decimal(value, field, MAX_AMOUNT)
    return int((amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def parse_hours(value: str | int | Decimal, field: str = "hours") -> Decimal:
    """Parse a decimal hour count, quantized to hundredths of an hour."""
    hours = _parse_decimal(value, field, MAX_HOURS)
    return hours.quantize(HOUR_PRECISION, rounding=ROUND_HALF_UP)


def hourly_amount_cents(hours: Decimal, rate_cents: int) -> int:
    """Amount owed for ``hours`` at ``rate_cents`` per hour, rounded half-up to a cent."""
    return int((hours * rate_cents).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int) -> str:
    """Render cents as a major-unit string, e.g. 65000 -> "650.00"."""
    return f"{Decimal(cents) / 100:.2f}"
