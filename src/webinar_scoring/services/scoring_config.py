"""Scoring configuration - per-tenant point values merged over defaults"""
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.webinar_scoring.errors import InvalidInputError
from src.webinar_scoring.models.engagement_event import EngagementEventType
from src.webinar_scoring.models.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

DEFAULT_EVENT_POINTS: dict[EngagementEventType, int] = {
    EngagementEventType.CHAT_MESSAGE: 1,
    EngagementEventType.QA_SUBMIT: 3,
    EngagementEventType.QA_UPVOTE: 1,
    EngagementEventType.POLL_RESPONSE: 2,
    EngagementEventType.REACTION: 1,
    EngagementEventType.CTA_CLICK: 5,
    # milestone events are valued per threshold
    EngagementEventType.WATCH_MILESTONE: 0,
}

DEFAULT_MILESTONE_POINTS: dict[int, int] = {
    25: 5,
    50: 10,
    75: 15,
    100: 25,
}

CONFIG_FIELDS = (
    "chat_message_points",
    "qa_submit_points",
    "qa_upvote_points",
    "poll_response_points",
    "reaction_points",
    "cta_click_points",
    "watch_25_points",
    "watch_50_points",
    "watch_75_points",
    "watch_100_points",
)


@dataclass(frozen=True)
class ResolvedScoringConfig:
    tenant_id: str
    chat_message_points: int
    qa_submit_points: int
    qa_upvote_points: int
    poll_response_points: int
    reaction_points: int
    cta_click_points: int
    watch_milestone_points: int
    watch_25_points: int
    watch_50_points: int
    watch_75_points: int
    watch_100_points: int

    def event_points(self, event_type: EngagementEventType) -> int:
        if event_type == EngagementEventType.CHAT_MESSAGE:
            return self.chat_message_points
        elif event_type == EngagementEventType.QA_SUBMIT:
            return self.qa_submit_points
        elif event_type == EngagementEventType.QA_UPVOTE:
            return self.qa_upvote_points
        elif event_type == EngagementEventType.POLL_RESPONSE:
            return self.poll_response_points
        elif event_type == EngagementEventType.REACTION:
            return self.reaction_points
        elif event_type == EngagementEventType.CTA_CLICK:
            return self.cta_click_points
        elif event_type == EngagementEventType.WATCH_MILESTONE:
            return self.watch_milestone_points
        raise InvalidInputError(f"Unknown event type: {event_type}")

    def milestone_points(self, milestone: int) -> int:
        if milestone == 25:
            return self.watch_25_points
        elif milestone == 50:
            return self.watch_50_points
        elif milestone == 75:
            return self.watch_75_points
        elif milestone == 100:
            return self.watch_100_points
        return 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _pick(override: Optional[int], default: int) -> int:
    return default if override is None else override


def get_scoring_config(db: Session, tenant_id: str) -> Optional[ScoringConfig]:
    return db.execute(
        select(ScoringConfig).where(ScoringConfig.tenant_id == tenant_id)
    ).scalar_one_or_none()


def merge_with_defaults(tenant_id: str, config: Optional[ScoringConfig]) -> ResolvedScoringConfig:
    def override(field: str) -> Optional[int]:
        return getattr(config, field) if config is not None else None

    return ResolvedScoringConfig(
        tenant_id=tenant_id,
        chat_message_points=_pick(override("chat_message_points"), DEFAULT_EVENT_POINTS[EngagementEventType.CHAT_MESSAGE]),
        qa_submit_points=_pick(override("qa_submit_points"), DEFAULT_EVENT_POINTS[EngagementEventType.QA_SUBMIT]),
        qa_upvote_points=_pick(override("qa_upvote_points"), DEFAULT_EVENT_POINTS[EngagementEventType.QA_UPVOTE]),
        poll_response_points=_pick(override("poll_response_points"), DEFAULT_EVENT_POINTS[EngagementEventType.POLL_RESPONSE]),
        reaction_points=_pick(override("reaction_points"), DEFAULT_EVENT_POINTS[EngagementEventType.REACTION]),
        cta_click_points=_pick(override("cta_click_points"), DEFAULT_EVENT_POINTS[EngagementEventType.CTA_CLICK]),
        watch_milestone_points=DEFAULT_EVENT_POINTS[EngagementEventType.WATCH_MILESTONE],
        watch_25_points=_pick(override("watch_25_points"), DEFAULT_MILESTONE_POINTS[25]),
        watch_50_points=_pick(override("watch_50_points"), DEFAULT_MILESTONE_POINTS[50]),
        watch_75_points=_pick(override("watch_75_points"), DEFAULT_MILESTONE_POINTS[75]),
        watch_100_points=_pick(override("watch_100_points"), DEFAULT_MILESTONE_POINTS[100]),
    )


def resolve_scoring_config(db: Session, tenant_id: str) -> ResolvedScoringConfig:
    """
    Return the tenant's complete point table.
    Fields the tenant has not set fall back to the defaults; a tenant with no
    config row gets the defaults for everything. Never writes.
    """
    return merge_with_defaults(tenant_id, get_scoring_config(db, tenant_id))


def _validate_update(update: dict[str, Optional[int]]) -> None:
    errors = []
    for field, value in update.items():
        if field not in CONFIG_FIELDS:
            errors.append(f"unknown field: {field}")
        elif value is not None and value < 0:
            errors.append(f"{field} must be >= 0")
    if errors:
        raise InvalidInputError("; ".join(errors))


def upsert_scoring_config(db: Session, tenant_id: str, update: dict[str, Optional[int]]) -> ScoringConfig:
    """
    Create or partially update a tenant's config.
    Only the keys present in `update` are written; a None value clears the
    override so the default applies again.
    """
    _validate_update(update)

    config = get_scoring_config(db, tenant_id)
    if config is None:
        config = ScoringConfig(tenant_id=tenant_id)
        db.add(config)
    for field, value in update.items():
        setattr(config, field, value)

    try:
        db.commit()
    except IntegrityError:
        # another request created the row first
        db.rollback()
        config = get_scoring_config(db, tenant_id)
        for field, value in update.items():
            setattr(config, field, value)
        db.commit()

    db.refresh(config)
    logger.info(f"Scoring config updated: tenant_id={tenant_id}, fields={sorted(update)}")
    return config


def reset_scoring_config(db: Session, tenant_id: str) -> bool:
    config = get_scoring_config(db, tenant_id)
    if config is None:
        return False
    db.delete(config)
    db.commit()
    logger.info(f"Scoring config reset to defaults: tenant_id={tenant_id}")
    return True
