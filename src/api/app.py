"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from src.api.dependencies import build_sync_service
from src.api.middleware.error_handler import ErrorHandlerMiddleware
from src.api.middleware.logging import LoggingMiddleware
from src.api.routes import health, sync
from src.application.services.sync_service import SyncService
from src.background.workers import WorkerManager
from src.config.database import close_database_connections, get_database_health
from src.config.logging import get_logger
from src.config.settings import Settings, settings as default_settings
from src.infrastructure.monitoring.health_checks import HealthChecker

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    sync_service: Optional[SyncService] = None,
    enable_workers: bool = True,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    When ``sync_service`` is given it is used as is and no database health
    check is registered; otherwise the service is built from settings at
    startup.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_database = sync_service is None
        service = sync_service or build_sync_service(settings)

        app.state.sync_service = service
        app.state.health_checker = HealthChecker(
            service, database_check=get_database_health if owns_database else None
        )

        service.start()

        worker_manager = None
        if enable_workers:
            worker_manager = WorkerManager(
                service, drain_interval_seconds=settings.SYNC_DRAIN_INTERVAL_SECONDS
            )
            await worker_manager.start_all_workers()
        app.state.worker_manager = worker_manager

        logger.info("Application startup", environment=settings.ENVIRONMENT)

        yield

        if worker_manager:
            await worker_manager.stop_all_workers()
        await service.stop()
        if owns_database:
            await close_database_connections()

        logger.info("Application shutdown")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Propagates learning platform changes to subscriber webhooks",
        openapi_url=f"{settings.API_PREFIX}/openapi.json" if settings.DEBUG else None,
        docs_url=f"{settings.API_PREFIX}/docs" if settings.DEBUG else None,
        redoc_url=f"{settings.API_PREFIX}/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Add custom middleware
    ErrorHandlerMiddleware(app)
    LoggingMiddleware(app)

    # Add routes
    app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])
    app.include_router(sync.router, prefix=settings.API_PREFIX, tags=["sync"])

    return app
