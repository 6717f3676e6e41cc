from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.app.api.middlewares import setup_middlewares
from src.app.api.v1.router import api_router
from src.app.core.config import get_settings
from src.app.core.db import dispose_engine
from src.app.core.exceptions import setup_exception_handlers
from src.app.core.health import setup_health_endpoint, setup_metrics
from src.app.core.logging import get_logger, setup_logging
from src.app.core.notifications import get_dispatcher

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info("Starting application", app_name=settings.app_name, env=settings.app_env)

    yield

    logger.info("Draining notification queue...")
    get_dispatcher().shutdown(wait=True)
    get_dispatcher.cache_clear()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "users", "description": "Signed-in user and admin directory"},
    {"name": "projects", "description": "Project intake and lifecycle"},
    {"name": "proposals", "description": "Priced offers and client decisions"},
    {"name": "billing", "description": "Time entries and invoices"},
    {"name": "payments", "description": "Payment intents, setup and processor webhooks"},
    {"name": "messages", "description": "Project conversations"},
    {"name": "invites", "description": "Admin invitations"},
    {"name": "subscriptions", "description": "Monthly hour packages"},
    {"name": "audit", "description": "Audit trail for master admins"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Code-fix marketplace API",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)

    app.include_router(api_router)

    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()
