"""The categories service application.

``create_app`` wires logging, tracing, error handlers and middleware around
the category routers and adds the operational ``/health`` and ``/info``
endpoints. The database must be reachable at startup.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI
from loguru import logger
from sqlalchemy.pool import QueuePool

from magazenn.api.constants import PING_CHECK_NAME
from magazenn.api.middleware.error_handler import register_exception_handlers
from magazenn.api.middleware.request_context import RequestContextMiddleware
from magazenn.api.middleware.request_logging import RequestLoggingMiddleware
from magazenn.api.routers import categories, ui
from magazenn.api.utils.responses import ORJSONResponse
from magazenn.core.config import Settings, get_settings
from magazenn.core.logging import setup_logging
from magazenn.core.observability import instrument_app, setup_tracing
from magazenn.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_engine,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Refuse to start without a database; dispose the engine on shutdown."""
    connected, reason = await check_database_connection()
    if not connected:
        logger.error("Database unreachable at startup: {}", reason)
        msg = f"Database connection failed: {reason}"
        raise RuntimeError(msg)

    logger.info("{} v{} started", app_instance.title, app_instance.version)
    try:
        yield
    finally:
        await close_database()
        logger.info("{} stopped", app_instance.title)


async def ping_category_resource() -> dict[str, Any]:
    return {
        "name": PING_CHECK_NAME,
        "status": "UP",
        "data": {"Response": await categories.hello()},
    }


def _log_pool_usage() -> None:
    pool = get_engine().pool
    if isinstance(pool, QueuePool):
        logger.bind(
            metric_type="db.pool.health",
            checked_out=pool.checkedout(),
            size=pool.size(),
            overflow=pool.overflow(),
        ).info("Database pool health check")


async def health() -> dict[str, Any]:
    """Liveness plus database reachability.

    An unreachable database marks the service ``degraded`` but the endpoint
    itself still answers 200.
    """
    connected, reason = await check_database_connection()
    if connected:
        _log_pool_usage()
    else:
        logger.warning("Database health check failed: {}", reason)

    return {
        "status": "healthy" if connected else "degraded",
        "database": connected,
        "checks": [await ping_category_resource()],
    }


async def info(
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any]:
    return {
        "app_name": app_settings.app_name,
        "version": app_settings.app_version,
        "environment": app_settings.environment,
        "debug": app_settings.debug,
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    register_exception_handlers(application)

    # Added last so it runs first: the correlation id must exist before
    # the request is logged
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(categories.router)
    application.include_router(ui.router)
    application.add_api_route("/health", health, methods=["GET"])
    application.add_api_route("/info", info, methods=["GET"])

    instrument_app(application, settings)
    return application


app = create_app()
