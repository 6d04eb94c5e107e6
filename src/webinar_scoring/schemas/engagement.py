"""Engagement event schemas"""
from datetime import datetime
from typing import Optional, Any, Dict
from pydantic import BaseModel

from src.webinar_scoring.models.engagement_event import EngagementEventType


class EngagementEventCreate(BaseModel):
    webinar_id: int
    registration_id: int
    event_type: EngagementEventType
    event_data: Optional[Dict[str, Any]] = None


class CtaClickCreate(BaseModel):
    webinar_id: int
    registration_id: int
    url: Optional[str] = None


class EngagementEventResponse(BaseModel):
    id: int
    webinar_id: int
    registration_id: int
    event_type: str
    event_data: Optional[Dict[str, Any]] = None
    points_earned: int
    created_at: datetime

    class Config:
        from_attributes = True


class EngagementStatsResponse(BaseModel):
    total_events: int
    total_points: int
    event_breakdown: Dict[str, int]
    unique_participants: int
    avg_points_per_participant: int
