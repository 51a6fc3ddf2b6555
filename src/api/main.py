"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import (
    ErrorHandlerMiddleware,
    LoggingMiddleware,
    setup_exception_handlers,
)
from src.api.routes import (
    analysis_router,
    cash_router,
    health_router,
    inventory_router,
    sales_router,
    stats_router,
)
from src.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Prepares storage and loads the ledger on startup, closes the pool on shutdown.
    """
    settings = get_settings()
    configure_logging()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        storage_backend=settings.storage.backend,
        llm_provider=settings.llm.provider,
    )

    if settings.storage.backend == "sqlite":
        try:
            from src.infrastructure.storage.sqlite import get_pool
            from src.infrastructure.storage.sqlite.migrations.migrator import run_migrations

            await run_migrations()
            logger.info("database_initialized")

            await get_pool()
            logger.info("connection_pool_ready")

        except Exception as e:
            logger.error("database_init_failed", error=str(e))
            raise

    # Load the ledger once; every request shares this session
    from src.application.services import get_ledger_session

    session = await get_ledger_session()
    logger.info("ledger_ready", batteries=len(session.engine.inventory))

    # Warm up LLM provider (optional)
    if settings.llm.warmup_on_start:
        try:
            from src.infrastructure.llm import get_llm_provider

            health_status = await get_llm_provider().check_health()
            logger.info("llm_provider_ready", healthy=health_status.available)

        except Exception as e:
            logger.warning("llm_warmup_failed", error=str(e))

    logger.info("application_started")

    yield

    logger.info("application_stopping")

    if settings.storage.backend == "sqlite":
        try:
            from src.infrastructure.storage.sqlite import close_pool

            await close_pool()
            logger.info("connection_pool_closed")

        except Exception as e:
            logger.warning("connection_pool_close_failed", error=str(e))

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Battery stock, sales, cash and scrap ledger with AI restocking advice",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(inventory_router)
    app.include_router(sales_router)
    app.include_router(cash_router)
    app.include_router(stats_router)
    app.include_router(analysis_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Return API info."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    # Root health endpoint (for container health checks)
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        """Simple health check at root level."""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
