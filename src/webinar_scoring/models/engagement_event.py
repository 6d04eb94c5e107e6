"""EngagementEvent model - append-only, point-valued interaction records"""
import enum
from datetime import datetime
from typing import Optional, Any
from sqlalchemy import String, Integer, DateTime, ForeignKey, JSON, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.webinar_scoring.models.base import Base


class EngagementEventType(str, enum.Enum):
    CHAT_MESSAGE = "chat_message"
    QA_SUBMIT = "qa_submit"
    QA_UPVOTE = "qa_upvote"
    POLL_RESPONSE = "poll_response"
    REACTION = "reaction"
    CTA_CLICK = "cta_click"
    WATCH_MILESTONE = "watch_milestone"


class EngagementEvent(Base):
    __tablename__ = "engagement_events"
    __table_args__ = (
        Index("ix_engagement_events_registration_created", "registration_id", "created_at"),
        Index("ix_engagement_events_webinar_created", "webinar_id", "created_at"),
        Index("ix_engagement_events_type", "event_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    webinar_id: Mapped[int] = mapped_column(Integer, ForeignKey("webinars.id"), nullable=False)
    registration_id: Mapped[int] = mapped_column(Integer, ForeignKey("registrations.id"), nullable=False)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    event_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    registration = relationship("Registration", backref="engagement_events")
