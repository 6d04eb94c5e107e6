"""APScheduler-driven lead score recalculation sweep"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.webinar_scoring.config import get_settings
from src.webinar_scoring.database import SessionLocal
from src.webinar_scoring.errors import ScoringError
from src.webinar_scoring.models.engagement_event import EngagementEvent
from src.webinar_scoring.models.watch_session import WatchSession
from src.webinar_scoring.services.lead_scoring import recalculate_for_webinar

logger = logging.getLogger(__name__)


def find_recently_active_webinars(db: Session, since: datetime) -> list[int]:
    with_events = db.execute(
        select(EngagementEvent.webinar_id).where(EngagementEvent.created_at >= since).distinct()
    ).scalars().all()
    with_sessions = db.execute(
        select(WatchSession.webinar_id).where(WatchSession.updated_at >= since).distinct()
    ).scalars().all()
    return sorted(set(with_events) | set(with_sessions))


def run_recalculation_sweep(
    session_factory: Callable[[], Session] = SessionLocal,
    lookback_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Recalculate lead scores for every webinar with engagement or watch activity
    inside the lookback window. Recovers scores whose best-effort update failed.
    """
    settings = get_settings()
    if lookback_minutes is None:
        lookback_minutes = settings.RECALC_SWEEP_LOOKBACK_MINUTES
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(minutes=lookback_minutes)

    db = session_factory()
    try:
        webinar_ids = find_recently_active_webinars(db, since)
        recalculated = 0
        failed_webinars = 0
        for webinar_id in webinar_ids:
            try:
                recalculated += recalculate_for_webinar(db, webinar_id)
            except (ScoringError, SQLAlchemyError) as e:
                db.rollback()
                failed_webinars += 1
                logger.error(f"Recalculation sweep failed for webinar_id={webinar_id}: {e}")
    finally:
        db.close()

    if webinar_ids:
        logger.info(
            f"Recalculation sweep: webinars={len(webinar_ids)}, registrants={recalculated}, "
            f"failed_webinars={failed_webinars}"
        )
    return {
        "webinars": len(webinar_ids),
        "registrants": recalculated,
        "failed_webinars": failed_webinars,
    }
