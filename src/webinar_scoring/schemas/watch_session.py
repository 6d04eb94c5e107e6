"""Watch session schemas"""
from datetime import datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, Field

from src.webinar_scoring.models.watch_session import MAX_WATCH_SECONDS


class WatchSessionStart(BaseModel):
    webinar_id: int
    registration_id: int


class WatchProgressRequest(BaseModel):
    current_seconds: float = Field(ge=0, le=MAX_WATCH_SECONDS)
    total_duration_seconds: float = Field(gt=0)


class WatchSessionResponse(BaseModel):
    id: int
    webinar_id: int
    registration_id: int
    session_start: datetime
    session_end: Optional[datetime] = None
    total_watch_seconds: int
    milestones_reached: List[int]

    class Config:
        from_attributes = True


class WatchProgressResponse(BaseModel):
    session: WatchSessionResponse
    new_milestones: List[int]


class WatchStatsResponse(BaseModel):
    total_sessions: int
    unique_viewers: int
    avg_watch_seconds: int
    milestone_breakdown: Dict[int, int]
    completion_rate: int
