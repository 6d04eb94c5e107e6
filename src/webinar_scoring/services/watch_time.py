"""Watch time service - watch session lifecycle and milestone detection"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from src.webinar_scoring.config import get_settings
from src.webinar_scoring.errors import InvalidInputError, NotFoundError, UnavailableError
from src.webinar_scoring.models.engagement_event import EngagementEventType
from src.webinar_scoring.models.watch_session import WatchSession, MILESTONES, MAX_WATCH_SECONDS
from src.webinar_scoring.services.directory import get_registration, get_webinar
from src.webinar_scoring.services.engagement import record_engagement
from src.webinar_scoring.services.reporting import round_half_up

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ProgressResult:
    session: WatchSession
    new_milestones: list[int] = field(default_factory=list)


def calculate_percentage(current_seconds: float, total_duration_seconds: float) -> int:
    if total_duration_seconds <= 0:
        return 0
    return math.floor(current_seconds / total_duration_seconds * 100)


def detect_new_milestones(reached: list[int], percentage: int) -> list[int]:
    already = set(reached or [])
    return [m for m in MILESTONES if m <= percentage and m not in already]


def get_active_session(db: Session, webinar_id: int, registration_id: int) -> Optional[WatchSession]:
    return db.execute(
        select(WatchSession)
        .where(
            WatchSession.webinar_id == webinar_id,
            WatchSession.registration_id == registration_id,
            WatchSession.session_end.is_(None),
        )
        .order_by(WatchSession.session_start.desc())
        .limit(1)
    ).scalar_one_or_none()


def get_watch_session(db: Session, session_id: int) -> WatchSession:
    session = db.get(WatchSession, session_id, populate_existing=True)
    if session is None:
        raise NotFoundError(f"Watch session not found: {session_id}")
    return session


def get_or_create_watch_session(db: Session, webinar_id: int, registration_id: int) -> WatchSession:
    """
    Return the open session for (webinar, registration), starting one if none
    is open. Calling it again before the session ends returns the same row,
    which is how reconnecting viewers resume their session.
    """
    existing = get_active_session(db, webinar_id, registration_id)
    if existing:
        return existing

    get_webinar(db, webinar_id)
    registration = get_registration(db, registration_id)
    if registration.webinar_id != webinar_id:
        raise InvalidInputError(
            f"Registration {registration_id} does not belong to webinar {webinar_id}"
        )

    session = WatchSession(
        webinar_id=webinar_id,
        registration_id=registration_id,
        session_start=datetime.now(timezone.utc),
        total_watch_seconds=0,
        milestones_reached=[],
    )
    db.add(session)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request opened the session first
        db.rollback()
        existing = get_active_session(db, webinar_id, registration_id)
        if existing is None:
            raise
        return existing

    db.refresh(session)
    logger.info(
        f"Watch session started: id={session.id}, webinar_id={webinar_id}, registration_id={registration_id}"
    )
    return session


start_watch_session = get_or_create_watch_session


def _retry_on_conflict(db: Session, session_id: int, operation: Callable[[], T]) -> T:
    max_attempts = get_settings().PROGRESS_MAX_RETRIES
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except StaleDataError:
            db.rollback()
            logger.warning(
                f"Concurrent update on watch session {session_id}, retrying ({attempt}/{max_attempts})"
            )
        except Exception:
            db.rollback()
            raise
    raise UnavailableError(
        f"Watch session {session_id} kept changing; gave up after {max_attempts} attempts"
    )


def update_watch_progress(
    db: Session,
    session_id: int,
    current_seconds: float,
    total_duration_seconds: float,
) -> ProgressResult:
    """
    Apply a progress report to an open session.

    Stores the furthest position reported so far, adds every milestone the
    position has crossed, and records one watch_milestone engagement event per
    milestone reached for the first time. The session update and the milestone
    events commit together; a concurrent writer on the same session makes the
    version check fail and the whole read-modify-write is replayed.
    """
    if current_seconds < 0:
        raise InvalidInputError("current_seconds must be >= 0")
    # also rejects NaN
    if not current_seconds <= MAX_WATCH_SECONDS:
        raise InvalidInputError(f"current_seconds must be <= {MAX_WATCH_SECONDS}")

    def apply() -> ProgressResult:
        session = get_watch_session(db, session_id)
        if not session.is_open:
            raise InvalidInputError(f"Watch session {session_id} has already ended")

        percentage = calculate_percentage(current_seconds, total_duration_seconds)
        new_milestones = detect_new_milestones(session.milestones_reached, percentage)

        session.total_watch_seconds = max(session.total_watch_seconds or 0, int(current_seconds))
        if new_milestones:
            session.milestones_reached = sorted(set(session.milestones_reached or []) | set(new_milestones))
        db.flush()

        for milestone in new_milestones:
            record_engagement(
                db,
                session.webinar_id,
                session.registration_id,
                EngagementEventType.WATCH_MILESTONE,
                {"milestone": milestone},
                commit=False,
            )
        db.commit()
        db.refresh(session)

        for milestone in new_milestones:
            logger.info(
                f"Milestone reached: session_id={session_id}, registration_id={session.registration_id}, "
                f"milestone={milestone}"
            )
        return ProgressResult(session=session, new_milestones=new_milestones)

    return _retry_on_conflict(db, session_id, apply)


def end_watch_session(db: Session, session_id: int) -> WatchSession:
    def apply() -> WatchSession:
        session = get_watch_session(db, session_id)
        if not session.is_open:
            logger.warning(f"Watch session {session_id} ended more than once")
        session.session_end = datetime.now(timezone.utc)
        db.commit()
        db.refresh(session)
        return session

    session = _retry_on_conflict(db, session_id, apply)
    logger.info(
        f"Watch session ended: id={session_id}, registration_id={session.registration_id}, "
        f"seconds={session.total_watch_seconds}"
    )
    return session


def list_registration_sessions(db: Session, registration_id: int) -> list[WatchSession]:
    return list(db.execute(
        select(WatchSession)
        .where(WatchSession.registration_id == registration_id)
        .order_by(WatchSession.session_start.desc(), WatchSession.id.desc())
    ).scalars().all())


def get_registration_total_watch_seconds(db: Session, registration_id: int) -> int:
    total = db.execute(
        select(func.coalesce(func.sum(WatchSession.total_watch_seconds), 0))
        .where(WatchSession.registration_id == registration_id)
    ).scalar()
    return int(total or 0)


def get_registration_highest_milestone(db: Session, registration_id: int) -> int:
    highest = 0
    for milestones in db.execute(
        select(WatchSession.milestones_reached).where(WatchSession.registration_id == registration_id)
    ).scalars():
        highest = max([highest, *(milestones or [])])
    return highest


def get_webinar_watch_stats(db: Session, webinar_id: int) -> dict[str, Any]:
    """
    Watch statistics for a webinar.
    Milestones are unioned across each viewer's sessions before counting, so a
    viewer who reached 50% in two sessions is counted once.
    """
    sessions = db.execute(
        select(
            WatchSession.registration_id,
            WatchSession.total_watch_seconds,
            WatchSession.milestones_reached,
        ).where(WatchSession.webinar_id == webinar_id)
    ).all()

    viewer_milestones: dict[int, set[int]] = {}
    total_watch_seconds = 0
    for row in sessions:
        total_watch_seconds += row.total_watch_seconds or 0
        viewer_milestones.setdefault(row.registration_id, set()).update(row.milestones_reached or [])

    unique_viewers = len(viewer_milestones)
    milestone_breakdown = {m: 0 for m in MILESTONES}
    for milestones in viewer_milestones.values():
        for m in MILESTONES:
            if m in milestones:
                milestone_breakdown[m] += 1

    return {
        "total_sessions": len(sessions),
        "unique_viewers": unique_viewers,
        "avg_watch_seconds": round_half_up(total_watch_seconds / unique_viewers) if unique_viewers > 0 else 0,
        "milestone_breakdown": milestone_breakdown,
        "completion_rate": (
            round_half_up(milestone_breakdown[100] / unique_viewers * 100) if unique_viewers > 0 else 0
        ),
    }
