"""WatchSession model - one span of a registrant watching one webinar"""
from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, DateTime, ForeignKey, JSON, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.webinar_scoring.models.base import Base, TimestampMixin

MILESTONES = (25, 50, 75, 100)

# upper bound of the INTEGER total_watch_seconds column
MAX_WATCH_SECONDS = 2**31 - 1


class WatchSession(Base, TimestampMixin):
    __tablename__ = "watch_sessions"
    __table_args__ = (
        # at most one open session per (webinar, registration)
        Index(
            "uq_watch_sessions_open_pair",
            "webinar_id",
            "registration_id",
            unique=True,
            postgresql_where=text("session_end IS NULL"),
            sqlite_where=text("session_end IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    webinar_id: Mapped[int] = mapped_column(Integer, ForeignKey("webinars.id"), nullable=False, index=True)
    registration_id: Mapped[int] = mapped_column(Integer, ForeignKey("registrations.id"), nullable=False, index=True)
    session_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    session_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    total_watch_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    milestones_reached: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    registration = relationship("Registration", backref="watch_sessions")

    @property
    def is_open(self) -> bool:
        return self.session_end is None
