"""Health check endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from hypolab import __version__
from hypolab.api.deps import DbDep
from hypolab.api.schemas import HealthResponse

router = APIRouter(tags=["system"])

logger = structlog.get_logger()


@router.get("/health", response_model=HealthResponse)
def health_check(
    db: DbDep,
) -> HealthResponse:
    db_ok = False
    try:
        db.check_connection()
        db_ok = True
    except SQLAlchemyError as exc:
        logger.warning("Health check failed", error=str(exc))

    return HealthResponse(
        status="healthy" if db_ok else "unhealthy",
        version=__version__,
        db_connected=db_ok,
    )
