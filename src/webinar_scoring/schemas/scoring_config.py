"""Scoring configuration schemas"""
from typing import Optional
from pydantic import BaseModel, Field


class ScoringConfigUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged, null clears an override"""
    chat_message_points: Optional[int] = Field(default=None, ge=0)
    qa_submit_points: Optional[int] = Field(default=None, ge=0)
    qa_upvote_points: Optional[int] = Field(default=None, ge=0)
    poll_response_points: Optional[int] = Field(default=None, ge=0)
    reaction_points: Optional[int] = Field(default=None, ge=0)
    cta_click_points: Optional[int] = Field(default=None, ge=0)
    watch_25_points: Optional[int] = Field(default=None, ge=0)
    watch_50_points: Optional[int] = Field(default=None, ge=0)
    watch_75_points: Optional[int] = Field(default=None, ge=0)
    watch_100_points: Optional[int] = Field(default=None, ge=0)


class ScoringConfigResponse(BaseModel):
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
    has_overrides: bool

    class Config:
        from_attributes = True
