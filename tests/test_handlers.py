from datetime import date

import pytest

from core.validator import validate
from handlers import media, practice, progress, subscription


def _json(envelope):
    assert len(envelope.content) == 1
    return envelope.content[0].value


@pytest.mark.parametrize("level, first_skill", [
    ("1", "Toe touch drills x10"),
    ("3", "Jumps combo x12"),
])
def test_practice_plan_by_level(level, first_skill):
    plan = _json(practice.handle_get_practice_plan({"age_band": "8-11", "level": level, "minutes": 20}))
    assert plan["title"] == f"Level {level} — 20 min plan (ages 8-11)"
    assert [s["name"] for s in plan["sections"]] == ["Warm-up", "Skills", "Cool-down"]
    assert plan["sections"][1]["items"][0] == first_skill
    assert plan["badges"] == ["Consistency-Star"]


def test_practice_plan_formats_integral_float_minutes():
    plan = _json(practice.handle_get_practice_plan({"age_band": "5-7", "level": "2", "minutes": 15.0}))
    assert "15 min" in plan["title"]


def test_practice_schema_rejects_unknown_age_band():
    from core.errors import InvalidEnumError
    with pytest.raises(InvalidEnumError):
        validate(practice.PRACTICE_PLAN_SCHEMA, {"age_band": "3-4", "level": "1", "minutes": 10})


def test_get_media_uses_base_url(monkeypatch):
    monkeypatch.setenv("PUBLIC_BASE_MEDIA_URL", "https://cdn.test/")
    items = _json(media.handle_get_media({"role": "mom", "age_band": "5-7", "topic": "toe-touch"}))["items"]
    assert [i["type"] for i in items] == ["video", "pdf", "image"]
    assert items[0]["embed_url"] == "https://www.youtube.com/embed/M7lc1UVf-VE"
    assert items[1]["url"] == "https://cdn.test/docs/toe_touch_checklist.pdf"
    assert items[2]["url"] == "https://cdn.test/images/form_cues.png"


def test_list_media_topics():
    assert _json(media.handle_list_media({"role": "cheerleader", "age_band": "12-14"})) == {
        "topics": ["toe-touch", "stretching", "competition-prep"]
    }


@pytest.mark.parametrize("today, expected", [
    (date(2026, 1, 15), "2026-02-15"),
    (date(2026, 1, 31), "2026-02-28"),
    (date(2024, 1, 31), "2024-02-29"),
    (date(2026, 12, 5), "2027-01-05"),
])
def test_subscription_renews_next_month(today, expected):
    data = _json(subscription.handle_check_subscription({"user_id": "a@b.c"}, today=lambda: today))
    assert data == {"active": True, "plan": "Pro-Monthly", "renews_on": expected}


@pytest.mark.parametrize("outcome, streak, badge", [
    ("completed", 1, "Toe-Touch-Novice"),
    ("partial", 0, None),
    ("skipped", 0, None),
])
def test_log_progress_is_deterministic(outcome, streak, badge):
    args = {"user_id": "u1", "skill": "toe-touch", "outcome": outcome}
    first = _json(progress.handle_log_progress(args))
    assert first == {"ok": True, "streak_days": streak, "earned_badge": badge}
    assert _json(progress.handle_log_progress(args)) == first
