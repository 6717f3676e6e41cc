"""Request context middleware.

Initializes everything request-scoped before the route runs:
- structlog contextvars: request_id
- AuditContext: IP address, user agent, request ID
"""

from asgi_correlation_id import correlation_id
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.app.core.audit_context import clear_audit_context, get_client_ip, set_audit_context
from src.app.core.logging import bind_request_context, clear_request_context


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets and always clears request-scoped context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        clear_request_context()
        clear_audit_context()

        request_id = correlation_id.get()
        try:
            bind_request_context(request_id)
            set_audit_context(
                ip_address=get_client_ip(
                    request.headers.get("x-forwarded-for"),
                    request.client.host if request.client else None,
                ),
                user_agent=request.headers.get("user-agent"),
                request_id=request_id,
            )
            return await call_next(request)
        finally:
            clear_audit_context()
            clear_request_context()
