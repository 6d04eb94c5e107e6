import pytest

from src.webinar_scoring.errors import InvalidInputError
from src.webinar_scoring.models.engagement_event import EngagementEventType
from src.webinar_scoring.services.scoring_config import (
    CONFIG_FIELDS,
    resolve_scoring_config,
    upsert_scoring_config,
    reset_scoring_config,
    get_scoring_config,
)


def test_defaults_without_config_row(db):
    config = resolve_scoring_config(db, "tenant_new")

    assert config.tenant_id == "tenant_new"
    assert config.event_points(EngagementEventType.CHAT_MESSAGE) == 1
    assert config.event_points(EngagementEventType.QA_SUBMIT) == 3
    assert config.event_points(EngagementEventType.QA_UPVOTE) == 1
    assert config.event_points(EngagementEventType.POLL_RESPONSE) == 2
    assert config.event_points(EngagementEventType.REACTION) == 1
    assert config.event_points(EngagementEventType.CTA_CLICK) == 5
    assert config.event_points(EngagementEventType.WATCH_MILESTONE) == 0
    assert [config.milestone_points(m) for m in (25, 50, 75, 100)] == [5, 10, 15, 25]
    # resolving never creates a row
    assert get_scoring_config(db, "tenant_new") is None


def test_partial_override_keeps_other_defaults(db):
    upsert_scoring_config(db, "tenant_a", {"cta_click_points": 20, "watch_100_points": 50})

    config = resolve_scoring_config(db, "tenant_a")
    assert config.cta_click_points == 20
    assert config.watch_100_points == 50
    assert config.chat_message_points == 1
    assert config.watch_25_points == 5


def test_resolved_config_is_total(db):
    upsert_scoring_config(db, "tenant_a", {"reaction_points": 4})

    values = resolve_scoring_config(db, "tenant_a").to_dict()
    for field in CONFIG_FIELDS:
        assert isinstance(values[field], int)
    assert values["watch_milestone_points"] == 0


def test_zero_override_is_respected(db):
    upsert_scoring_config(db, "tenant_a", {"chat_message_points": 0})

    assert resolve_scoring_config(db, "tenant_a").chat_message_points == 0


def test_update_is_partial_and_null_clears(db):
    upsert_scoring_config(db, "tenant_a", {"qa_submit_points": 7, "poll_response_points": 9})
    upsert_scoring_config(db, "tenant_a", {"qa_submit_points": None})

    config = resolve_scoring_config(db, "tenant_a")
    assert config.qa_submit_points == 3
    assert config.poll_response_points == 9


def test_config_is_per_tenant(db):
    upsert_scoring_config(db, "tenant_a", {"cta_click_points": 11})

    assert resolve_scoring_config(db, "tenant_b").cta_click_points == 5


def test_reset_restores_defaults(db):
    upsert_scoring_config(db, "tenant_a", {"cta_click_points": 11})

    assert reset_scoring_config(db, "tenant_a") is True
    assert reset_scoring_config(db, "tenant_a") is False
    assert resolve_scoring_config(db, "tenant_a").cta_click_points == 5


@pytest.mark.parametrize("update", [
    {"chat_message_points": -1},
    {"not_a_field": 3},
])
def test_invalid_update_rejected(db, update):
    with pytest.raises(InvalidInputError):
        upsert_scoring_config(db, "tenant_a", update)
    assert get_scoring_config(db, "tenant_a") is None


def test_non_canonical_milestone_earns_nothing(db):
    assert resolve_scoring_config(db, "tenant_a").milestone_points(60) == 0
