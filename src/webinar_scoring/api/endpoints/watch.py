"""Watch session endpoints - start/resume, progress pings, leave"""
from fastapi import APIRouter, BackgroundTasks

from src.webinar_scoring.api.deps import DbSession, SessionFactory
from src.webinar_scoring.schemas.watch_session import (
    WatchSessionStart,
    WatchProgressRequest,
    WatchSessionResponse,
    WatchProgressResponse,
    WatchStatsResponse,
)
from src.webinar_scoring.services.lead_scoring import recalculate_lead_score_safely
from src.webinar_scoring.services.watch_time import (
    get_or_create_watch_session,
    update_watch_progress,
    end_watch_session,
    list_registration_sessions,
    get_webinar_watch_stats,
)

router = APIRouter(prefix="/api", tags=["Watch Time"])


@router.post("/watch/sessions", response_model=WatchSessionResponse)
def start_session(db: DbSession, request: WatchSessionStart):
    """Start a watch session, or return the one already open for this registrant"""
    return get_or_create_watch_session(db, request.webinar_id, request.registration_id)


@router.post("/watch/sessions/{session_id}/progress", response_model=WatchProgressResponse)
def report_progress(
    session_id: int,
    request: WatchProgressRequest,
    db: DbSession,
    session_factory: SessionFactory,
    background_tasks: BackgroundTasks,
):
    result = update_watch_progress(
        db, session_id, request.current_seconds, request.total_duration_seconds
    )
    if result.new_milestones:
        background_tasks.add_task(
            recalculate_lead_score_safely, result.session.registration_id, session_factory
        )
    return {"session": result.session, "new_milestones": result.new_milestones}


@router.post("/watch/sessions/{session_id}/end", response_model=WatchSessionResponse)
def end_session(session_id: int, db: DbSession):
    return end_watch_session(db, session_id)


@router.get("/registrations/{registration_id}/watch-sessions", response_model=list[WatchSessionResponse])
def registration_sessions(registration_id: int, db: DbSession):
    return list_registration_sessions(db, registration_id)


@router.get("/webinars/{webinar_id}/watch-stats", response_model=WatchStatsResponse)
def webinar_watch_stats(webinar_id: int, db: DbSession):
    return get_webinar_watch_stats(db, webinar_id)
