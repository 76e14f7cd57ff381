"""
FastAPI application entry point.

The app's screens talk to this API; all data stays in the local
key-value store. Using an application factory (create_app) because:
- Tests can hand in an in-memory store
- Initialization order is explicit: migrate, then load, then serve

For local development:
    uvicorn swimlog.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.dependencies import create_data_context
from .api.routes import entities, health, log, swimmers, times, trainings
from .config.settings import get_settings
from .infrastructure.kvstore import KeyValueStore

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup builds the data context and runs it: the legacy migration
    first (at most once per installation), then every collection loads.
    Requests are served only after that finishes.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "SwimLog API starting",
        extra={
            "version": __version__,
            "storage_mock_mode": settings.storage_mock_mode,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Invalid configuration",
            extra={"missing_fields": missing_fields}
        )

    data = create_data_context(settings, store=app.state.store)
    await data.start()
    app.state.data = data

    yield

    logger.info("SwimLog API shutting down")


def create_app(store: Optional[KeyValueStore] = None) -> FastAPI:
    """
    Application factory.

    Args:
        store: Key-value store to use instead of the configured backend
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.api_version,
        description="""
        Local swim practice log.

        - Manage teams, groups, strokes, swimmers, times, and trainings
        - Look up best times per swimmer, stroke, and distance
        - Log quick practice reps with effort-adjusted target times
        """,
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(entities.teams_router, prefix="/api/v1/teams", tags=["Teams"])
    app.include_router(entities.groups_router, prefix="/api/v1/groups", tags=["Groups"])
    app.include_router(entities.strokes_router, prefix="/api/v1/strokes", tags=["Strokes"])
    app.include_router(swimmers.router, prefix="/api/v1/swimmers", tags=["Swimmers"])
    app.include_router(times.router, prefix="/api/v1/times", tags=["Times"])
    app.include_router(trainings.router, prefix="/api/v1/trainings", tags=["Trainings"])
    app.include_router(log.router, prefix="/api/v1", tags=["Log"])

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Logs the full error server-side but returns a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error."}
        )

    return app


# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "swimlog.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
