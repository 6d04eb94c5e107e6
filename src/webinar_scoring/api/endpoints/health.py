"""Liveness and storage check for the scoring service"""
import logging
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.webinar_scoring.api.deps import SessionFactory
from src.webinar_scoring.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "webinar-scoring"


@router.get("/health")
def health_check(session_factory: SessionFactory):
    """
    200 when the score store answers, 503 otherwise. Also reports whether the
    recalculation sweep is scheduled in this process.
    """
    storage_ok = True
    try:
        with session_factory() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        storage_ok = False
        logger.warning(f"Health check: score store unreachable: {e}")

    body = {
        "service": SERVICE_NAME,
        "status": "ok" if storage_ok else "degraded",
        "environment": settings.APP_ENV,
        "database": "connected" if storage_ok else "unavailable",
        "recalculation_sweep": {
            "enabled": settings.SCHEDULER_ENABLED,
            "interval_minutes": settings.RECALC_SWEEP_MINUTES,
        },
    }
    return JSONResponse(status_code=200 if storage_ok else 503, content=body)
