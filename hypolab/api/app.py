"""FastAPI application factory and the ``hypolab-api`` entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from hypolab import __version__
from hypolab.api.middleware import CorrelationIdMiddleware, add_exception_handlers
from hypolab.api.routes import criteria, experiments, hypotheses, ideas, system
from hypolab.config import Settings
from hypolab.db import Database
from hypolab.logging import configure_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = structlog.get_logger()

API_PREFIX = "/api/v1"
ROUTERS = (system.router, ideas.router, hypotheses.router, experiments.router, criteria.router)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the store for the lifetime of the process."""
    settings: Settings = app.state.settings
    settings.ensure_data_dir()
    configure_logging(log_level=settings.log_level, log_format=settings.log_format)

    db = Database(settings.db_path, busy_timeout_ms=settings.db_busy_timeout_ms)
    db.init_schema()
    app.state.db = db

    logger.info("Hypolab API started", db_path=str(settings.db_path))
    try:
        yield
    finally:
        db.close()
        logger.info("Hypolab API shut down")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Hypolab",
        description="Hypothesis validation workflow API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)
    app.mount("/metrics", make_asgi_app())
    for router in ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    return app


def main() -> None:
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "hypolab.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
