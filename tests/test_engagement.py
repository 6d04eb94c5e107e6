import pytest

from src.webinar_scoring.errors import InvalidInputError, NotFoundError
from src.webinar_scoring.models.engagement_event import EngagementEventType
from src.webinar_scoring.services.engagement import (
    record_engagement,
    list_registration_events,
    list_webinar_events,
    get_registration_engagement_score,
    get_webinar_engagement_stats,
)
from src.webinar_scoring.services.scoring_config import upsert_scoring_config


@pytest.fixture
def registration(make_webinar, make_registration):
    return make_registration(make_webinar())


@pytest.mark.parametrize("event_type,points", [
    ("chat_message", 1),
    ("qa_submit", 3),
    ("qa_upvote", 1),
    ("poll_response", 2),
    ("reaction", 1),
    ("cta_click", 5),
])
def test_default_points_per_event_type(db, registration, event_type, points):
    event = record_engagement(db, registration.webinar_id, registration.id, event_type)

    assert event.id is not None
    assert event.event_type == event_type
    assert event.points_earned == points


@pytest.mark.parametrize("milestone,points", [
    (25, 5), (50, 10), (75, 15), (100, 25), (60, 0),
    # integral floats count as their integer value
    (50.0, 10), (60.0, 0),
])
def test_milestone_points(db, registration, milestone, points):
    event = record_engagement(
        db, registration.webinar_id, registration.id,
        EngagementEventType.WATCH_MILESTONE, {"milestone": milestone},
    )
    assert event.points_earned == points


@pytest.mark.parametrize("event_data", [
    None, {}, {"milestone": "50"}, {"milestone": True}, {"milestone": 50.5}, {"milestone": float("inf")},
])
def test_malformed_milestone_rejected(db, registration, event_data):
    with pytest.raises(InvalidInputError):
        record_engagement(db, registration.webinar_id, registration.id, "watch_milestone", event_data)
    assert list_registration_events(db, registration.id) == []


def test_unknown_event_type_rejected(db, registration):
    with pytest.raises(InvalidInputError):
        record_engagement(db, registration.webinar_id, registration.id, "page_view")


def test_unknown_webinar_and_registration(db, registration):
    with pytest.raises(NotFoundError):
        record_engagement(db, 9999, registration.id, "chat_message")
    with pytest.raises(NotFoundError):
        record_engagement(db, registration.webinar_id, 9999, "chat_message")


def test_registration_from_another_webinar_rejected(db, make_webinar, make_registration):
    first = make_webinar()
    second = make_webinar(title="Follow-up")
    registration = make_registration(first)

    with pytest.raises(InvalidInputError):
        record_engagement(db, second.id, registration.id, "chat_message")


def test_points_use_tenant_override(db, make_webinar, make_registration):
    webinar = make_webinar(tenant_id="tenant_cta")
    registration = make_registration(webinar)
    upsert_scoring_config(db, "tenant_cta", {"cta_click_points": 12})

    event = record_engagement(db, webinar.id, registration.id, "cta_click", {"url": "https://example.com"})
    assert event.points_earned == 12
    assert event.event_data == {"url": "https://example.com"}


def test_points_are_frozen_when_config_changes(db, registration):
    record_engagement(db, registration.webinar_id, registration.id, "qa_submit")
    upsert_scoring_config(db, "tenant_a", {"qa_submit_points": 10})
    record_engagement(db, registration.webinar_id, registration.id, "qa_submit")

    points = [e.points_earned for e in list_registration_events(db, registration.id)]
    assert points == [3, 10]
    assert get_registration_engagement_score(db, registration.id) == 13


def test_engagement_score_without_events_is_zero(db, registration):
    assert get_registration_engagement_score(db, registration.id) == 0


def test_list_webinar_events_filters(db, registration):
    record_engagement(db, registration.webinar_id, registration.id, "chat_message")
    record_engagement(db, registration.webinar_id, registration.id, "reaction")
    record_engagement(db, registration.webinar_id, registration.id, "chat_message")

    events = list_webinar_events(db, registration.webinar_id)
    assert len(events) == 3
    assert [e.id for e in events] == sorted((e.id for e in events), reverse=True)

    chats = list_webinar_events(db, registration.webinar_id, event_type="chat_message")
    assert len(chats) == 2
    assert len(list_webinar_events(db, registration.webinar_id, limit=1)) == 1


def test_webinar_engagement_stats(db, make_webinar, make_registration):
    webinar = make_webinar()
    alice = make_registration(webinar)
    bob = make_registration(webinar)
    record_engagement(db, webinar.id, alice.id, "cta_click")
    record_engagement(db, webinar.id, alice.id, "chat_message")
    record_engagement(db, webinar.id, bob.id, "qa_submit")

    stats = get_webinar_engagement_stats(db, webinar.id)
    assert stats["total_events"] == 3
    assert stats["total_points"] == 9
    assert stats["event_breakdown"] == {"cta_click": 1, "chat_message": 1, "qa_submit": 1}
    assert stats["unique_participants"] == 2
    # 9 / 2 = 4.5 rounds half up
    assert stats["avg_points_per_participant"] == 5


def test_webinar_engagement_stats_empty(db, make_webinar):
    stats = get_webinar_engagement_stats(db, make_webinar().id)
    assert stats["total_events"] == 0
    assert stats["avg_points_per_participant"] == 0
