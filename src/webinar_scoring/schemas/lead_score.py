"""Lead score and reporting schemas"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel


class LeadScoreResponse(BaseModel):
    registration_id: int
    total_score: int
    engagement_score: int
    watch_time_score: int
    interaction_score: int
    last_calculated_at: datetime

    class Config:
        from_attributes = True


class RegistrantSummary(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    attended: bool
    watched_replay: bool
    created_at: datetime


class LeaderboardEntry(LeadScoreResponse):
    registration: RegistrantSummary


class ScoreBucket(BaseModel):
    range: str
    count: int
    percentage: int


class ScoreSummary(BaseModel):
    total_scored: int
    avg_score: int
    median_score: int
    max_score: int
    min_score: int
    top_scorers: List[LeaderboardEntry]


class RecalculateResult(BaseModel):
    webinar_id: int
    recalculated: int
