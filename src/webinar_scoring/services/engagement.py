"""Engagement service - records point-valued interaction events"""
import logging
from datetime import datetime, timezone
from typing import Optional, Any

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from src.webinar_scoring.errors import InvalidInputError
from src.webinar_scoring.models.engagement_event import EngagementEvent, EngagementEventType
from src.webinar_scoring.services.directory import get_tenant_id, get_registration
from src.webinar_scoring.services.reporting import round_half_up
from src.webinar_scoring.services.scoring_config import ResolvedScoringConfig, resolve_scoring_config

logger = logging.getLogger(__name__)


def parse_event_type(event_type: str | EngagementEventType) -> EngagementEventType:
    try:
        return EngagementEventType(event_type)
    except ValueError:
        raise InvalidInputError(f"Unknown event type: {event_type}")


def parse_milestone(event_data: Optional[dict[str, Any]]) -> int:
    milestone = (event_data or {}).get("milestone")
    if isinstance(milestone, bool):
        raise InvalidInputError(f"watch_milestone events need an integer milestone, got {milestone!r}")
    if isinstance(milestone, int):
        return milestone
    # JSON clients may send 50.0
    if isinstance(milestone, float) and milestone.is_integer():
        return int(milestone)
    raise InvalidInputError(f"watch_milestone events need an integer milestone, got {milestone!r}")


def get_points_for_event(
    config: ResolvedScoringConfig,
    event_type: EngagementEventType,
    event_data: Optional[dict[str, Any]] = None,
) -> int:
    if event_type == EngagementEventType.WATCH_MILESTONE:
        # non-canonical thresholds earn nothing
        return config.milestone_points(parse_milestone(event_data))
    return config.event_points(event_type)


def record_engagement(
    db: Session,
    webinar_id: int,
    registration_id: int,
    event_type: str | EngagementEventType,
    event_data: Optional[dict[str, Any]] = None,
    commit: bool = True,
) -> EngagementEvent:
    """
    Persist one engagement event with its points frozen from the tenant's
    current config. Lead score recalculation is left to the caller.
    """
    event_type = parse_event_type(event_type)
    tenant_id = get_tenant_id(db, webinar_id)
    registration = get_registration(db, registration_id)
    if registration.webinar_id != webinar_id:
        raise InvalidInputError(
            f"Registration {registration_id} does not belong to webinar {webinar_id}"
        )

    config = resolve_scoring_config(db, tenant_id)
    points = get_points_for_event(config, event_type, event_data)

    event = EngagementEvent(
        webinar_id=webinar_id,
        registration_id=registration_id,
        event_type=event_type.value,
        event_data=event_data,
        points_earned=points,
        created_at=datetime.now(timezone.utc),
    )
    db.add(event)

    if commit:
        db.commit()
        db.refresh(event)
    else:
        db.flush()

    logger.info(
        f"Engagement recorded: webinar_id={webinar_id}, registration_id={registration_id}, "
        f"type={event_type.value}, +{points}"
    )
    return event


def list_registration_events(db: Session, registration_id: int) -> list[EngagementEvent]:
    return list(db.execute(
        select(EngagementEvent)
        .where(EngagementEvent.registration_id == registration_id)
        .order_by(EngagementEvent.created_at, EngagementEvent.id)
    ).scalars().all())


def list_webinar_events(
    db: Session,
    webinar_id: int,
    event_type: Optional[str | EngagementEventType] = None,
    limit: Optional[int] = None,
) -> list[EngagementEvent]:
    query = select(EngagementEvent).where(EngagementEvent.webinar_id == webinar_id)
    if event_type:
        query = query.where(EngagementEvent.event_type == parse_event_type(event_type).value)
    query = query.order_by(EngagementEvent.created_at.desc(), EngagementEvent.id.desc())
    if limit:
        query = query.limit(limit)
    return list(db.execute(query).scalars().all())


def get_registration_engagement_score(db: Session, registration_id: int) -> int:
    total = db.execute(
        select(func.coalesce(func.sum(EngagementEvent.points_earned), 0))
        .where(EngagementEvent.registration_id == registration_id)
    ).scalar()
    return int(total or 0)


def get_webinar_engagement_stats(db: Session, webinar_id: int) -> dict[str, Any]:
    """
    Event counts per type, total points and per-participant average for a webinar.
    """
    rows = db.execute(
        select(
            EngagementEvent.event_type,
            func.count(EngagementEvent.id).label("events"),
            func.coalesce(func.sum(EngagementEvent.points_earned), 0).label("points"),
        )
        .where(EngagementEvent.webinar_id == webinar_id)
        .group_by(EngagementEvent.event_type)
    ).all()

    unique_participants = db.execute(
        select(func.count(func.distinct(EngagementEvent.registration_id)))
        .where(EngagementEvent.webinar_id == webinar_id)
    ).scalar() or 0

    event_breakdown = {row.event_type: row.events for row in rows}
    total_events = sum(event_breakdown.values())
    total_points = sum(int(row.points) for row in rows)

    return {
        "total_events": total_events,
        "total_points": total_points,
        "event_breakdown": event_breakdown,
        "unique_participants": unique_participants,
        "avg_points_per_participant": (
            round_half_up(total_points / unique_participants) if unique_participants > 0 else 0
        ),
    }
