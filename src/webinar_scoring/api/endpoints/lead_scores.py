"""Lead score calculation and reporting endpoints"""
from typing import Optional
from fastapi import APIRouter, Query
from fastapi.responses import Response

from src.webinar_scoring.api.deps import DbSession
from src.webinar_scoring.config import settings
from src.webinar_scoring.schemas.lead_score import (
    LeadScoreResponse,
    LeaderboardEntry,
    ScoreBucket,
    ScoreSummary,
    RecalculateResult,
)
from src.webinar_scoring.services.lead_scoring import (
    calculate_lead_score,
    get_or_calculate_lead_score,
    recalculate_for_webinar,
)
from src.webinar_scoring.services.reporting import (
    get_leaderboard,
    get_score_distribution,
    get_score_summary,
    export_lead_scores_csv,
)

router = APIRouter(prefix="/api", tags=["Lead Scores"])


@router.post("/registrations/{registration_id}/lead-score", response_model=LeadScoreResponse)
def calculate_score(registration_id: int, db: DbSession):
    return calculate_lead_score(db, registration_id)


@router.get("/registrations/{registration_id}/lead-score", response_model=LeadScoreResponse)
def read_score(registration_id: int, db: DbSession):
    """Stored score, calculated on first request"""
    return get_or_calculate_lead_score(db, registration_id)


@router.post("/webinars/{webinar_id}/lead-scores/recalculate", response_model=RecalculateResult)
def recalculate_webinar(webinar_id: int, db: DbSession):
    count = recalculate_for_webinar(db, webinar_id)
    return {"webinar_id": webinar_id, "recalculated": count}


@router.get("/webinars/{webinar_id}/lead-scores", response_model=list[LeaderboardEntry])
def leaderboard(
    webinar_id: int,
    db: DbSession,
    limit: int = Query(settings.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=settings.LEADERBOARD_MAX_LIMIT),
    offset: int = Query(0, ge=0),
    min_score: Optional[int] = Query(None),
):
    return get_leaderboard(db, webinar_id, limit=limit, offset=offset, min_score=min_score)


@router.get("/webinars/{webinar_id}/lead-scores/distribution", response_model=list[ScoreBucket])
def distribution(webinar_id: int, db: DbSession):
    return get_score_distribution(db, webinar_id)


@router.get("/webinars/{webinar_id}/lead-scores/summary", response_model=ScoreSummary)
def summary(webinar_id: int, db: DbSession):
    return get_score_summary(db, webinar_id)


@router.get("/webinars/{webinar_id}/lead-scores/export")
def export_csv(webinar_id: int, db: DbSession):
    csv_content = export_lead_scores_csv(db, webinar_id)
    return Response(
        content=csv_content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="lead_scores_webinar_{webinar_id}.csv"'
        }
    )
