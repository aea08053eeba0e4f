"""
Main FastAPI application for the FPL Sync API.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from fpl_sync.api.errors import register_exception_handlers
from fpl_sync.api.routes import (
    events,
    fixtures,
    health,
    leagues,
    live,
    phases,
    player_stats,
    player_values,
    players,
    sync,
    teams,
)
from fpl_sync.container import Container, build_container
from fpl_sync.core.config import Settings, settings as default_settings
from fpl_sync.core.database import init_db
from fpl_sync.core.logging import configure_logging, get_logger
from fpl_sync.core.middleware import CorrelationIdMiddleware
from fpl_sync.core.scheduler import AutomationScheduler

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    With a prebuilt ``container`` (tests) the lifespan neither builds clients
    nor starts the scheduler, and leaves closing them to the caller.
    """
    settings = settings or (container.settings if container else default_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        # Startup
        owns_container = container is None
        if owns_container:
            configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

        app.state.container = container or build_container(settings)
        if app.state.container.engine is not None:
            init_db(app.state.container.engine)

        app.state.scheduler = None
        if owns_container and settings.SCHEDULER_ENABLED:
            scheduler = AutomationScheduler(
                app.state.container.orchestrator,
                timezone=settings.SCHEDULER_TIMEZONE,
                live_interval_minutes=settings.LIVE_SYNC_INTERVAL_MINUTES,
            )
            await scheduler.start()
            app.state.scheduler = scheduler
            logger.info("Automation scheduler started")

        logger.info("Application started")

        yield

        # Shutdown
        if app.state.scheduler is not None:
            await app.state.scheduler.stop()
            logger.info("Automation scheduler stopped")
        if owns_container:
            await app.state.container.aclose()
        logger.info("Shutting down application")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Fantasy Premier League data synced into Postgres and served through a Redis read-through cache",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container
        app.state.scheduler = None

    # Add correlation ID middleware (must be added before CORS for proper header handling)
    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    if settings.METRICS_ENABLED:
        app.mount("/metrics", make_asgi_app())

    app.include_router(health.router)
    # API v1 - All routes use /api/v1/ prefix for versioning
    for module in (events, teams, players, player_stats, player_values, phases, fixtures, live, leagues, sync):
        app.include_router(module.router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "endpoints": {
                "api_version": "v1",
                "events": "/api/v1/events",
                "teams": "/api/v1/teams",
                "players": "/api/v1/players",
                "player_stats": "/api/v1/player-stats/{event_id}",
                "player_values": "/api/v1/player-values/{change_date}",
                "phases": "/api/v1/phases",
                "fixtures": "/api/v1/fixtures",
                "live": "/api/v1/live/{event_id}",
                "leagues": "/api/v1/leagues/classic/{league_id}",
                "sync": "/api/v1/sync/status",
                "docs": "/docs",
                "health": "/health",
                "metrics": "/metrics",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fpl_sync.main:app", host=default_settings.HOST, port=default_settings.PORT, reload=default_settings.DEBUG)
