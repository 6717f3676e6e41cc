"""Domain error taxonomy and the handlers that render it.

Every error that reaches the HTTP boundary carries a stable ``kind`` and a plain
message. Internal detail is logged server-side only.
"""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.app.core.logging import get_logger

logger = get_logger(__name__)


class FlowFixError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: str = "error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(FlowFixError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please sign in to continue."


class Forbidden(FlowFixError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You don't have access to this."


class NotFound(FlowFixError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "We couldn't find what you were looking for."


class InvalidTransition(FlowFixError):
    kind = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT
    default_message = "This change isn't possible right now."


class ConflictingProposal(FlowFixError):
    kind = "conflicting_proposal"
    status_code = status.HTTP_409_CONFLICT
    default_message = (
        "This project already has a proposal waiting for a decision. "
        "It must be rejected before a new one can be sent."
    )


class ConflictingInterest(FlowFixError):
    kind = "conflicting_interest"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You have already asked to take on this project."


class AlreadyRated(FlowFixError):
    kind = "already_rated"
    status_code = status.HTTP_409_CONFLICT
    default_message = "This project has already been rated."


class PaymentMethodRequired(FlowFixError):
    kind = "payment_method_required"
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Please add a payment method before accepting this proposal."


class PaymentConfigurationError(FlowFixError):
    kind = "payment_configuration_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Payment processing is unavailable. Please contact support."


class PaymentDeclined(FlowFixError):
    kind = "payment_declined"
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Your payment was declined. Please try different payment details."


class PaymentProcessorError(FlowFixError):
    kind = "payment_processor_error"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "We couldn't reach the payment processor. Please try again shortly."


class WebhookRejected(FlowFixError):
    kind = "webhook_rejected"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Webhook could not be verified."


class ValidationError(FlowFixError):
    kind = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Some of the information provided is missing or invalid."


class StoreUnavailable(FlowFixError):
    kind = "store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "We're having trouble saving your changes. Please try again."


def _error_body(kind: str, detail: Any) -> dict[str, Any]:
    return {"kind": kind, "detail": detail, "request_id": correlation_id.get()}


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers so every error response has kind, detail and request_id."""

    @app.exception_handler(FlowFixError)
    async def flowfix_error_handler(request: Request, exc: FlowFixError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("Request failed", kind=exc.kind, path=request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.kind, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(ValidationError.kind, errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("http_error", exc.detail),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("http_error", exc.detail),
        )

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Store operation failed", path=request.url.path, exc_info=exc)
        error = StoreUnavailable()
        return JSONResponse(
            status_code=error.status_code,
            content=_error_body(error.kind, error.message),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception", path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("internal_error", "Internal server error"),
        )
