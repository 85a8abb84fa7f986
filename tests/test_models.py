from datetime import date

import pytest

from journal.constants import JOURNAL_ENTRIES, MEALS, WEEKLY_PLANS
from journal.models import (
    JournalEntry,
    Meal,
    WeeklyPlan,
    clamp_rating,
    entity_from_row,
    normalize_day,
    parse_amount,
    week_days,
    week_start_for,
)


@pytest.mark.parametrize(
    "value, expected",
    [(0, 1), (-3, 1), (11, 10), (7, 7), ("8", 8), (6.6, 7), ("abc", 5), (None, 5)],
)
def test_clamp_rating(value, expected):
    assert clamp_rating(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0.0), ("", 0.0), ("  ", 0.0), ("12.5", 12.5), ("abc", 0.0), (float("nan"), 0.0), (-4, -4.0)],
)
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


def test_normalize_day_accepts_dates_and_timestamps():
    assert normalize_day(date(2024, 1, 1)) == "2024-01-01"
    assert normalize_day("2024-01-01T10:00:00") == "2024-01-01"
    assert normalize_day("not a date") is None
    assert normalize_day("") is None


def test_week_start_is_sunday_anchor():
    assert week_start_for(date(2024, 5, 15)) == date(2024, 5, 12)
    assert week_start_for(date(2024, 5, 12)) == date(2024, 5, 12)
    assert week_start_for("2024-05-18") == date(2024, 5, 12)
    days = week_days(date(2024, 5, 12))
    assert days[0] == "2024-05-12"
    assert days[-1] == "2024-05-18"
    assert len(days) == 7


def test_journal_entry_from_row_clamps_ratings():
    entry = JournalEntry.from_row({"id": "e1", "date": "2024-01-02", "content": "Hi", "energy": 42, "productivity": 0})
    assert entry.energy == 10
    assert entry.productivity == 1
    assert entry.to_payload() == {"date": "2024-01-02", "content": "Hi", "energy": 10, "productivity": 1}


def test_meal_from_row_coerces_unknown_type_and_amounts():
    meal = Meal.from_row({"id": "m1", "date": "2024-01-01", "type": "Brunch", "name": "Eggs", "calories": "250"})
    assert meal.type == "snack"
    assert meal.calories == 250.0
    assert meal.protein == 0.0
    assert meal.notes == ""


def test_weekly_plan_decodes_days_json_and_collects_meal_ids():
    plan = WeeklyPlan.from_row(
        {
            "id": "p1",
            "week_start": "2024-05-12",
            "days_json": '{"2024-05-13": {"breakfast": "m1", "snacks": ["m2"], "notes": "gym"}, "2024-05-14": {}}',
        }
    )
    assert plan.days["2024-05-13"] == {"breakfast": "m1", "snacks": ["m2"], "notes": "gym"}
    assert plan.days["2024-05-14"] == {}
    assert plan.meal_ids() == {"m1", "m2"}


def test_weekly_plan_tolerates_broken_days_json():
    plan = WeeklyPlan.from_row({"id": "p1", "week_start": "2024-05-12", "days_json": "{broken"})
    assert plan.days == {}


def test_entity_from_row_dispatches_on_kind():
    assert isinstance(entity_from_row(JOURNAL_ENTRIES, {"id": "a", "date": "2024-01-01"}), JournalEntry)
    assert isinstance(entity_from_row(MEALS, {"id": "a", "date": "2024-01-01"}), Meal)
    assert isinstance(entity_from_row(WEEKLY_PLANS, {"id": "a", "week_start": "2024-01-07"}), WeeklyPlan)
    with pytest.raises(ValueError):
        entity_from_row("habits", {})
