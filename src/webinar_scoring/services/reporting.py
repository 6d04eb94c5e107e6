"""Reporting service for lead score leaderboards, distributions and exports"""
import csv
import io
import math
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.webinar_scoring.config import get_settings
from src.webinar_scoring.models.lead_score import LeadScore
from src.webinar_scoring.models.registration import Registration

SCORE_RANGES = [
    ("0-10", 0, 10),
    ("11-25", 11, 25),
    ("26-50", 26, 50),
    ("51-100", 51, 100),
    ("100+", 101, None),
]

TOP_SCORERS_LIMIT = 5

EXPORT_HEADERS = [
    "Email",
    "Name",
    "Total Score",
    "Engagement Score",
    "Watch Time Score",
    "Interaction Score",
    "Attended Live",
    "Watched Replay",
    "Registered At",
    "Last Calculated",
]


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2026-01-31T09:00:00.000Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _leaderboard_entry(score: LeadScore, registration: Registration) -> dict[str, Any]:
    return {
        "registration_id": score.registration_id,
        "total_score": score.total_score,
        "engagement_score": score.engagement_score,
        "watch_time_score": score.watch_time_score,
        "interaction_score": score.interaction_score,
        "last_calculated_at": score.last_calculated_at,
        "registration": {
            "id": registration.id,
            "email": registration.email,
            "name": registration.name,
            "attended": registration.attended,
            "watched_replay": registration.watched_replay,
            "created_at": registration.created_at,
        },
    }


def get_leaderboard(
    db: Session,
    webinar_id: int,
    limit: Optional[int] = None,
    offset: int = 0,
    min_score: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Lead scores of a webinar's registrants, highest first.
    Equal totals are ordered by registration id so pages never overlap.
    """
    if limit is None:
        limit = get_settings().LEADERBOARD_DEFAULT_LIMIT

    query = (
        select(LeadScore, Registration)
        .join(Registration, LeadScore.registration_id == Registration.id)
        .where(Registration.webinar_id == webinar_id)
    )
    if min_score is not None:
        query = query.where(LeadScore.total_score >= min_score)

    rows = db.execute(
        query.order_by(LeadScore.total_score.desc(), LeadScore.registration_id.asc())
        .offset(offset)
        .limit(limit)
    ).all()

    return [_leaderboard_entry(score, registration) for score, registration in rows]


def get_webinar_scores(db: Session, webinar_id: int) -> list[int]:
    return list(db.execute(
        select(LeadScore.total_score)
        .join(Registration, LeadScore.registration_id == Registration.id)
        .where(Registration.webinar_id == webinar_id)
    ).scalars().all())


def get_score_distribution(db: Session, webinar_id: int) -> list[dict[str, Any]]:
    """
    Bucket scored registrants into fixed inclusive ranges.
    Returns an empty list when nobody has been scored yet.
    """
    scores = get_webinar_scores(db, webinar_id)
    total = len(scores)
    if total == 0:
        return []

    results = []
    for label, low, high in SCORE_RANGES:
        count = sum(1 for s in scores if s >= low and (high is None or s <= high))
        results.append({
            "range": label,
            "count": count,
            "percentage": round_half_up(count / total * 100),
        })
    return results


def get_score_summary(db: Session, webinar_id: int) -> dict[str, Any]:
    scores = sorted(get_webinar_scores(db, webinar_id))
    if not scores:
        return {
            "total_scored": 0,
            "avg_score": 0,
            "median_score": 0,
            "max_score": 0,
            "min_score": 0,
            "top_scorers": [],
        }

    count = len(scores)
    mid = count // 2
    if count % 2 == 0:
        median = (scores[mid - 1] + scores[mid]) / 2
    else:
        median = scores[mid]

    return {
        "total_scored": count,
        "avg_score": round_half_up(sum(scores) / count),
        "median_score": round_half_up(median),
        "max_score": scores[-1],
        "min_score": scores[0],
        "top_scorers": get_leaderboard(db, webinar_id, limit=TOP_SCORERS_LIMIT),
    }


def _export_row(entry: dict[str, Any]) -> list[str]:
    registration = entry["registration"]
    return [
        registration["email"],
        registration["name"] or "",
        str(entry["total_score"]),
        str(entry["engagement_score"]),
        str(entry["watch_time_score"]),
        str(entry["interaction_score"]),
        "Yes" if registration["attended"] else "No",
        "Yes" if registration["watched_replay"] else "No",
        format_timestamp(registration["created_at"]),
        format_timestamp(entry["last_calculated_at"]),
    ]


def export_lead_scores_csv(db: Session, webinar_id: int) -> str:
    """
    Leaderboard as CSV text: plain header line, then every value double-quoted
    with embedded quotes doubled. Lines are joined with \\n, no trailing newline.
    """
    leaderboard = get_leaderboard(db, webinar_id, limit=get_settings().EXPORT_MAX_ROWS)

    output = io.StringIO()
    output.write(",".join(EXPORT_HEADERS) + "\n")
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(_export_row(entry) for entry in leaderboard)

    return output.getvalue().removesuffix("\n")
