"""Health and metrics endpoints."""

import secrets
import time
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text

from src.app.core.config import get_settings
from src.app.core.db import get_session
from src.app.core.payments import get_payment_gateway

_health_cache: dict[str, Any] | None = None
_health_cache_time: float = 0
HEALTH_CACHE_TTL = 10  # seconds


def reset_health_cache() -> None:
    """Reset health cache (for testing)."""
    global _health_cache, _health_cache_time
    _health_cache = None
    _health_cache_time = 0


def setup_health_endpoint(app: FastAPI) -> None:
    @app.get("/health", tags=["health"])
    async def health() -> JSONResponse:
        """Store connectivity plus payment configuration, cached briefly."""
        global _health_cache, _health_cache_time

        now = time.time()
        if _health_cache and (now - _health_cache_time) < HEALTH_CACHE_TTL:
            cached = {**_health_cache, "cached": True}
            return JSONResponse(
                content=cached, status_code=200 if cached["status"] == "healthy" else 503
            )

        health_status: dict[str, Any] = {
            "status": "healthy",
            "database": "unknown",
            "payments": "configured" if get_payment_gateway().configured else "not_configured",
            "cached": False,
            "timestamp": now,
        }

        try:
            async with get_session() as session:
                await session.execute(text("SELECT 1"))
            health_status["database"] = "healthy"
        except Exception as e:
            health_status["database"] = f"unhealthy: {type(e).__name__}"
            health_status["status"] = "unhealthy"

        _health_cache = health_status
        _health_cache_time = now

        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(content=health_status, status_code=status_code)


def setup_metrics(app: FastAPI) -> None:
    """Configure Prometheus metrics with optional API key protection."""
    settings = get_settings()
    instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app)

    if not settings.metrics_api_key:
        instrumentator.expose(app, endpoint="/metrics", include_in_schema=False)
        return

    api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

    async def verify_metrics_key(api_key: str | None = Depends(api_key_header)) -> None:
        expected = settings.metrics_api_key
        if api_key is None or expected is None or not secrets.compare_digest(api_key, expected):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or missing metrics API key",
            )

    instrumentator.expose(
        app,
        endpoint="/metrics",
        include_in_schema=False,
        dependencies=[Depends(verify_metrics_key)],
    )
