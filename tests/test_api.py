import pytest
from sqlalchemy.exc import OperationalError

from src.webinar_scoring.api.deps import get_session_factory
from src.webinar_scoring.main import app
from src.webinar_scoring.services.reporting import EXPORT_HEADERS


@pytest.fixture
def registration(make_webinar, make_registration):
    return make_registration(make_webinar(), attended=True)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["service"] == "webinar-scoring"
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["recalculation_sweep"]["enabled"] is False


def test_health_reports_unreachable_store(client):
    def unreachable():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    app.dependency_overrides[get_session_factory] = lambda: unreachable

    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unavailable"


@pytest.mark.parametrize("current_seconds", [2**31, 1e20])
def test_progress_rejects_oversized_seconds(client, registration, current_seconds):
    body = {"webinar_id": registration.webinar_id, "registration_id": registration.id}
    session_id = client.post("/api/watch/sessions", json=body).json()["id"]

    response = client.post(
        f"/api/watch/sessions/{session_id}/progress",
        json={"current_seconds": current_seconds, "total_duration_seconds": 100},
    )
    assert response.status_code == 422

    sessions = client.get(f"/api/registrations/{registration.id}/watch-sessions").json()
    assert sessions[0]["total_watch_seconds"] == 0


def test_milestone_event_with_float_value(client, registration):
    response = client.post("/api/engagement/events", json={
        "webinar_id": registration.webinar_id,
        "registration_id": registration.id,
        "event_type": "watch_milestone",
        "event_data": {"milestone": 50.0},
    })
    assert response.status_code == 201
    assert response.json()["points_earned"] == 10


def test_watch_flow(client, registration):
    body = {"webinar_id": registration.webinar_id, "registration_id": registration.id}
    started = client.post("/api/watch/sessions", json=body)
    assert started.status_code == 200
    session_id = started.json()["id"]
    assert client.post("/api/watch/sessions", json=body).json()["id"] == session_id

    progress = client.post(
        f"/api/watch/sessions/{session_id}/progress",
        json={"current_seconds": 150, "total_duration_seconds": 300},
    )
    assert progress.status_code == 200
    assert progress.json()["new_milestones"] == [25, 50]
    assert progress.json()["session"]["milestones_reached"] == [25, 50]

    # milestones triggered a background recalculation
    score = client.get(f"/api/registrations/{registration.id}/lead-score").json()
    assert score["engagement_score"] == 15
    assert score["watch_time_score"] == 2
    assert score["interaction_score"] == 10
    assert score["total_score"] == 27

    ended = client.post(f"/api/watch/sessions/{session_id}/end")
    assert ended.status_code == 200
    assert ended.json()["session_end"] is not None

    closed = client.post(
        f"/api/watch/sessions/{session_id}/progress",
        json={"current_seconds": 200, "total_duration_seconds": 300},
    )
    assert closed.status_code == 400

    sessions = client.get(f"/api/registrations/{registration.id}/watch-sessions").json()
    assert len(sessions) == 1

    stats = client.get(f"/api/webinars/{registration.webinar_id}/watch-stats").json()
    assert stats["unique_viewers"] == 1
    assert stats["milestone_breakdown"] == {"25": 1, "50": 1, "75": 0, "100": 0}


def test_progress_validation(client, registration):
    body = {"webinar_id": registration.webinar_id, "registration_id": registration.id}
    session_id = client.post("/api/watch/sessions", json=body).json()["id"]

    bad_duration = client.post(
        f"/api/watch/sessions/{session_id}/progress",
        json={"current_seconds": 10, "total_duration_seconds": 0},
    )
    assert bad_duration.status_code == 422

    missing = client.post(
        "/api/watch/sessions/9999/progress",
        json={"current_seconds": 10, "total_duration_seconds": 100},
    )
    assert missing.status_code == 404
    assert "9999" in missing.json()["detail"]


def test_track_engagement(client, registration):
    response = client.post("/api/engagement/events", json={
        "webinar_id": registration.webinar_id,
        "registration_id": registration.id,
        "event_type": "qa_submit",
        "event_data": {"question": "Pricing?"},
    })
    assert response.status_code == 201
    assert response.json()["points_earned"] == 3

    cta = client.post("/api/engagement/cta-click", json={
        "webinar_id": registration.webinar_id,
        "registration_id": registration.id,
        "url": "https://example.com/offer",
    })
    assert cta.status_code == 201
    assert cta.json()["event_type"] == "cta_click"

    score = client.get(f"/api/registrations/{registration.id}/lead-score").json()
    assert score["engagement_score"] == 8

    events = client.get(f"/api/registrations/{registration.id}/engagement-events").json()
    assert [e["event_type"] for e in events] == ["qa_submit", "cta_click"]

    filtered = client.get(
        f"/api/webinars/{registration.webinar_id}/engagement-events", params={"event_type": "cta_click"}
    ).json()
    assert len(filtered) == 1

    stats = client.get(f"/api/webinars/{registration.webinar_id}/engagement-stats").json()
    assert stats["total_points"] == 8


def test_engagement_errors(client, registration, make_webinar):
    base = {"webinar_id": registration.webinar_id, "registration_id": registration.id}

    assert client.post("/api/engagement/events", json={**base, "event_type": "page_view"}).status_code == 422
    assert client.post(
        "/api/engagement/events", json={**base, "event_type": "watch_milestone", "event_data": {}}
    ).status_code == 400
    assert client.post(
        "/api/engagement/events", json={**base, "registration_id": 9999, "event_type": "reaction"}
    ).status_code == 404

    other = make_webinar(title="Other")
    assert client.post(
        "/api/engagement/events", json={**base, "webinar_id": other.id, "event_type": "reaction"}
    ).status_code == 400


def test_failed_recalculation_does_not_fail_write(client, registration):
    def broken_factory():
        raise RuntimeError("scores unavailable")

    app.dependency_overrides[get_session_factory] = lambda: broken_factory

    response = client.post("/api/engagement/events", json={
        "webinar_id": registration.webinar_id,
        "registration_id": registration.id,
        "event_type": "reaction",
    })
    assert response.status_code == 201


def test_scoring_config_endpoints(client):
    initial = client.get("/api/tenants/acme/scoring-config").json()
    assert initial["has_overrides"] is False
    assert initial["cta_click_points"] == 5

    updated = client.put("/api/tenants/acme/scoring-config", json={"cta_click_points": 0, "watch_100_points": 40})
    assert updated.status_code == 200
    assert updated.json()["cta_click_points"] == 0
    assert updated.json()["watch_100_points"] == 40
    assert updated.json()["qa_submit_points"] == 3
    assert updated.json()["has_overrides"] is True

    assert client.put("/api/tenants/acme/scoring-config", json={"reaction_points": -2}).status_code == 422

    reset = client.delete("/api/tenants/acme/scoring-config").json()
    assert reset["has_overrides"] is False
    assert reset["cta_click_points"] == 5


def test_lead_score_endpoints(client, make_webinar, make_registration, make_score):
    webinar = make_webinar()
    top = make_registration(webinar, name="Top")
    low = make_registration(webinar, name="Low")
    make_score(top, 60)
    make_score(low, 5)

    board = client.get(f"/api/webinars/{webinar.id}/lead-scores").json()
    assert [e["registration"]["name"] for e in board] == ["Top", "Low"]

    filtered = client.get(f"/api/webinars/{webinar.id}/lead-scores", params={"min_score": 10}).json()
    assert len(filtered) == 1

    assert client.get(f"/api/webinars/{webinar.id}/lead-scores", params={"limit": 0}).status_code == 422

    buckets = client.get(f"/api/webinars/{webinar.id}/lead-scores/distribution").json()
    assert {b["range"]: b["count"] for b in buckets}["51-100"] == 1

    summary = client.get(f"/api/webinars/{webinar.id}/lead-scores/summary").json()
    assert summary["total_scored"] == 2
    assert summary["max_score"] == 60

    recalculated = client.post(f"/api/webinars/{webinar.id}/lead-scores/recalculate").json()
    assert recalculated == {"webinar_id": webinar.id, "recalculated": 2}

    # stored snapshots were replaced by real calculations
    calculated = client.post(f"/api/registrations/{top.id}/lead-score").json()
    assert calculated["total_score"] == 0


def test_lead_score_not_found(client):
    assert client.get("/api/registrations/9999/lead-score").status_code == 404
    assert client.post("/api/webinars/9999/lead-scores/recalculate").status_code == 404


def test_export_download(client, make_webinar, make_registration, make_score):
    webinar = make_webinar()
    make_score(make_registration(webinar, email="lead@example.com"), 12)

    response = client.get(f"/api/webinars/{webinar.id}/lead-scores/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert f"lead_scores_webinar_{webinar.id}.csv" in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert lines[0] == ",".join(EXPORT_HEADERS)
    assert lines[1].startswith('"lead@example.com",')
