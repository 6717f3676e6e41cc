"""Database engine management."""

import ssl
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.app.core.config import get_settings

_engine: AsyncEngine | None = None


def _get_connect_args(database_url: str) -> dict[str, Any]:
    """Connection arguments, including SSL for PostgreSQL."""
    if not database_url.startswith("postgresql"):
        return {}

    settings = get_settings()
    connect_args: dict[str, Any] = {}

    ssl_mode = settings.database_ssl_mode
    if ssl_mode != "disable":
        ssl_context = ssl.create_default_context()
        if ssl_mode in ("prefer", "require"):
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        elif ssl_mode in ("verify-ca", "verify-full"):
            ssl_context.check_hostname = ssl_mode == "verify-full"
            ssl_context.verify_mode = ssl.CERT_REQUIRED
        connect_args["ssl"] = ssl_context

    return connect_args


def get_engine() -> AsyncEngine:
    """Get or create the database engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        options: dict[str, Any] = {"pool_pre_ping": True}
        if settings.database_url.startswith("postgresql"):
            options["pool_size"] = settings.database_pool_size
            options["max_overflow"] = settings.database_max_overflow
        _engine = create_async_engine(
            settings.database_url,
            connect_args=_get_connect_args(settings.database_url),
            **options,
        )
    return _engine


def set_engine(engine: AsyncEngine | None) -> None:
    """Replace the engine singleton (tests point it at a throw-away database)."""
    global _engine
    _engine = engine


async def dispose_engine() -> None:
    """Dispose the database engine. Call during shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
