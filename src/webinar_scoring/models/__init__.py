"""Database models"""
from src.webinar_scoring.models.base import Base
from src.webinar_scoring.models.webinar import Webinar
from src.webinar_scoring.models.registration import Registration
from src.webinar_scoring.models.watch_session import WatchSession, MILESTONES
from src.webinar_scoring.models.engagement_event import EngagementEvent, EngagementEventType
from src.webinar_scoring.models.scoring_config import ScoringConfig
from src.webinar_scoring.models.lead_score import LeadScore

__all__ = [
    "Base", "Webinar", "Registration", "WatchSession", "MILESTONES",
    "EngagementEvent", "EngagementEventType", "ScoringConfig", "LeadScore",
]
