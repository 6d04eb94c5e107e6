"""Engagement tracking endpoints"""
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Query

from src.webinar_scoring.api.deps import DbSession, SessionFactory
from src.webinar_scoring.models.engagement_event import EngagementEventType
from src.webinar_scoring.schemas.engagement import (
    EngagementEventCreate,
    CtaClickCreate,
    EngagementEventResponse,
    EngagementStatsResponse,
)
from src.webinar_scoring.services.engagement import (
    record_engagement,
    list_registration_events,
    list_webinar_events,
    get_webinar_engagement_stats,
)
from src.webinar_scoring.services.lead_scoring import recalculate_lead_score_safely

router = APIRouter(prefix="/api", tags=["Engagement"])


@router.post("/engagement/events", response_model=EngagementEventResponse, status_code=201)
def track_engagement(
    request: EngagementEventCreate,
    db: DbSession,
    session_factory: SessionFactory,
    background_tasks: BackgroundTasks,
):
    """
    Record an engagement event.
    The registrant's lead score is recalculated after the response is sent;
    a failed recalculation never fails this request.
    """
    event = record_engagement(
        db, request.webinar_id, request.registration_id, request.event_type, request.event_data
    )
    background_tasks.add_task(recalculate_lead_score_safely, request.registration_id, session_factory)
    return event


@router.post("/engagement/cta-click", response_model=EngagementEventResponse, status_code=201)
def track_cta_click(
    request: CtaClickCreate,
    db: DbSession,
    session_factory: SessionFactory,
    background_tasks: BackgroundTasks,
):
    event = record_engagement(
        db, request.webinar_id, request.registration_id, EngagementEventType.CTA_CLICK, {"url": request.url}
    )
    background_tasks.add_task(recalculate_lead_score_safely, request.registration_id, session_factory)
    return event


@router.get("/webinars/{webinar_id}/engagement-events", response_model=list[EngagementEventResponse])
def webinar_events(
    webinar_id: int,
    db: DbSession,
    event_type: Optional[EngagementEventType] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
):
    return list_webinar_events(db, webinar_id, event_type=event_type, limit=limit)


@router.get("/webinars/{webinar_id}/engagement-stats", response_model=EngagementStatsResponse)
def webinar_engagement_stats(webinar_id: int, db: DbSession):
    return get_webinar_engagement_stats(db, webinar_id)


@router.get("/registrations/{registration_id}/engagement-events", response_model=list[EngagementEventResponse])
def registration_events(registration_id: int, db: DbSession):
    return list_registration_events(db, registration_id)
