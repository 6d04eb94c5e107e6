"""LeadScore model - one current score snapshot per registrant"""
from datetime import datetime
from sqlalchemy import Integer, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, backref

from src.webinar_scoring.models.base import Base


class LeadScore(Base):
    __tablename__ = "lead_scores"
    __table_args__ = (
        Index("ix_lead_scores_total", "total_score"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    registration_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("registrations.id"), unique=True, nullable=False, index=True
    )
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    engagement_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    watch_time_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    interaction_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    registration = relationship("Registration", backref=backref("lead_score", uselist=False))
