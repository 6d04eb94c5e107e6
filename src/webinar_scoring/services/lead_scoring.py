"""Lead scoring service - combines engagement, watch time and attendance into one score"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.webinar_scoring.database import SessionLocal
from src.webinar_scoring.errors import ScoringError, UnavailableError
from src.webinar_scoring.models.lead_score import LeadScore
from src.webinar_scoring.services.directory import get_attendance_flags, get_webinar, list_registration_ids
from src.webinar_scoring.services.engagement import get_registration_engagement_score
from src.webinar_scoring.services.watch_time import get_registration_total_watch_seconds

logger = logging.getLogger(__name__)

SECONDS_PER_POINT = 60
ATTENDED_LIVE_BONUS = 10
WATCHED_REPLAY_BONUS = 5


def get_lead_score(db: Session, registration_id: int) -> Optional[LeadScore]:
    return db.execute(
        select(LeadScore).where(LeadScore.registration_id == registration_id)
    ).scalar_one_or_none()


def _apply_scores(score: LeadScore, engagement: int, watch_time: int, interaction: int, now: datetime) -> None:
    score.engagement_score = engagement
    score.watch_time_score = watch_time
    score.interaction_score = interaction
    score.total_score = engagement + watch_time + interaction
    score.last_calculated_at = now


def upsert_lead_score(
    db: Session,
    registration_id: int,
    engagement: int,
    watch_time: int,
    interaction: int,
) -> LeadScore:
    now = datetime.now(timezone.utc)
    score = get_lead_score(db, registration_id)
    if score is None:
        score = LeadScore(registration_id=registration_id)
        db.add(score)
    _apply_scores(score, engagement, watch_time, interaction, now)

    try:
        db.commit()
    except IntegrityError:
        # a concurrent calculation inserted the row; same inputs, so overwrite it
        db.rollback()
        score = get_lead_score(db, registration_id)
        _apply_scores(score, engagement, watch_time, interaction, now)
        db.commit()

    db.refresh(score)
    return score


def calculate_lead_score(db: Session, registration_id: int) -> LeadScore:
    """
    Recompute a registrant's score from scratch and upsert it.

    engagement  = sum of points over all of the registrant's engagement events
    watch time  = one point per full minute watched, summed over all sessions
    interaction = +10 for attending live, +5 for watching the replay
    """
    try:
        flags = get_attendance_flags(db, registration_id)
        engagement_score = get_registration_engagement_score(db, registration_id)
        watch_time_score = get_registration_total_watch_seconds(db, registration_id) // SECONDS_PER_POINT

        interaction_score = 0
        if flags.attended:
            interaction_score += ATTENDED_LIVE_BONUS
        if flags.watched_replay:
            interaction_score += WATCHED_REPLAY_BONUS

        score = upsert_lead_score(db, registration_id, engagement_score, watch_time_score, interaction_score)
    except OperationalError as e:
        db.rollback()
        raise UnavailableError(f"Lead score storage unavailable: {e}") from e

    logger.info(
        f"Lead score updated: registration_id={registration_id}, total={score.total_score}, "
        f"engagement={score.engagement_score}, watch_time={score.watch_time_score}, "
        f"interaction={score.interaction_score}"
    )
    return score


def get_or_calculate_lead_score(db: Session, registration_id: int) -> LeadScore:
    existing = get_lead_score(db, registration_id)
    if existing:
        return existing
    return calculate_lead_score(db, registration_id)


def recalculate_for_webinar(db: Session, webinar_id: int) -> int:
    """
    Recalculate every registrant of a webinar, one commit per registrant.
    A registrant that fails is logged and skipped; returns the number of
    registrants whose score was written.
    """
    get_webinar(db, webinar_id)
    registration_ids = list_registration_ids(db, webinar_id)

    count = 0
    for registration_id in registration_ids:
        try:
            calculate_lead_score(db, registration_id)
            count += 1
        except (ScoringError, SQLAlchemyError) as e:
            db.rollback()
            logger.error(f"Lead score recalculation failed: registration_id={registration_id}, error={e}")

    logger.info(f"Recalculated lead scores: webinar_id={webinar_id}, {count}/{len(registration_ids)}")
    return count


def recalculate_lead_score_safely(
    registration_id: int,
    session_factory: Callable[[], Session] = SessionLocal,
) -> None:
    """
    Fire-and-forget recalculation run after an engagement write.
    Failures are logged and swallowed; the recalculation sweep picks up
    any score that missed an update.
    """
    db = None
    try:
        db = session_factory()
        calculate_lead_score(db, registration_id)
    except Exception as e:
        logger.error(f"Background lead score recalculation failed: registration_id={registration_id}, error={e}")
    finally:
        if db is not None:
            db.close()
