"""ScoringConfig model - per-tenant point value overrides"""
from typing import Optional
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from src.webinar_scoring.models.base import Base, TimestampMixin


class ScoringConfig(Base, TimestampMixin):
    __tablename__ = "scoring_configs"

    id: Mapped[int] = mapped_column(primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)

    # NULL means "use the default" for that field
    chat_message_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    qa_submit_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    qa_upvote_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    poll_response_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    reaction_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cta_click_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    watch_25_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    watch_50_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    watch_75_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    watch_100_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
