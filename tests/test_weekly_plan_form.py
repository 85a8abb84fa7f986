from datetime import date

from journal.constants import MEALS, WEEKLY_PLANS
from journal.forms.base import FormState
from journal.forms.weekly_plan_form import WeeklyPlanForm
from journal.store import EntityStore

WEEK = ["2024-05-12", "2024-05-13", "2024-05-14", "2024-05-15", "2024-05-16", "2024-05-17", "2024-05-18"]


def _stores(adapter, owner):
    meals = EntityStore(MEALS, owner_id=owner)
    plans = EntityStore(WEEKLY_PLANS, owner_id=owner)
    return meals, plans


def _add_meal(adapter, meals, name, meal_type):
    meal = adapter.create(MEALS, {"date": "2024-05-01", "name": name, "type": meal_type})
    meals.upsert_many(adapter.fetch_all(MEALS, meals.owner_id))
    return meal


def test_opens_the_week_containing_today(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)
    assert form.week_start == date(2024, 5, 12)
    assert form.days == WEEK
    assert form.is_new


def test_week_navigation(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)
    form.next_week()
    assert form.week_start == date(2024, 5, 19)
    form.previous_week()
    form.previous_week()
    assert form.week_start == date(2024, 5, 5)
    form.current_week()
    assert form.week_start == date(2024, 5, 12)


def test_assign_and_save_plan(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    oats = _add_meal(adapter, meals, "Oats", "breakfast")
    apple = _add_meal(adapter, meals, "Apple", "snack")
    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)

    assert form.assign("2024-05-13", "breakfast", oats.id) is True
    assert form.assign("2024-05-13", "snack", apple.id) is True
    assert form.set_notes("2024-05-13", "Gym day") is True
    assert form.meal_id_for("2024-05-13", "snack") == apple.id
    assert form.submit() is True

    [plan] = adapter.fetch_all(WEEKLY_PLANS, owner)
    assert plan.week_start == "2024-05-12"
    assert plan.days == {"2024-05-13": {"breakfast": oats.id, "snacks": [apple.id], "notes": "Gym day"}}
    assert form.entity_id == plan.id
    assert form.state == FormState.EDITING


def test_assign_validates_day_type_and_meal(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    oats = _add_meal(adapter, meals, "Oats", "breakfast")
    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)

    assert form.assign("2024-05-20", "breakfast", oats.id) is False
    assert form.assign("2024-05-13", "brunch", oats.id) is False
    assert form.assign("2024-05-13", "dinner", oats.id) is False
    assert form.assign("2024-05-13", "breakfast", "missing") is False
    assert form.meal_id_for("2024-05-13", "breakfast") is None
    assert len(form.drain_notices()) == 4


def test_empty_id_clears_a_slot(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    apple = _add_meal(adapter, meals, "Apple", "snack")
    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)
    form.assign("2024-05-14", "snack", apple.id)
    form.assign("2024-05-14", "snack", "")
    assert form.meal_id_for("2024-05-14", "snack") is None
    assert form.draft["days"]["2024-05-14"] == {}


def test_existing_plan_is_loaded_for_the_displayed_week(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    oats = _add_meal(adapter, meals, "Oats", "breakfast")
    adapter.create(WEEKLY_PLANS, {"week_start": "2024-05-12", "days": {"2024-05-15": {"breakfast": oats.id}}})
    plans.upsert_many(adapter.fetch_all(WEEKLY_PLANS, owner))

    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)
    assert not form.is_new
    assert form.resolve_day("2024-05-15")["breakfast"].name == "Oats"

    form.next_week()
    assert form.is_new
    assert form.meal_id_for("2024-05-22", "breakfast") is None


def test_deleted_meal_resolves_to_none_and_is_pruned_on_save(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    oats = _add_meal(adapter, meals, "Oats", "breakfast")
    toast = _add_meal(adapter, meals, "Toast", "lunch")
    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)
    form.assign("2024-05-13", "breakfast", oats.id)
    form.assign("2024-05-13", "lunch", toast.id)
    form.submit()

    adapter.remove(MEALS, oats.id)
    meals.upsert_many(adapter.fetch_all(MEALS, owner))
    [stored] = adapter.fetch_all(WEEKLY_PLANS, owner)
    assert oats.id in stored.meal_ids()
    assert form.resolve_day("2024-05-13")["breakfast"] is None

    assert form.prune_missing_meals() == 1
    form.submit()
    [stored] = adapter.fetch_all(WEEKLY_PLANS, owner)
    assert stored.days == {"2024-05-13": {"lunch": toast.id}}


def test_clearing_a_plan(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    apple = _add_meal(adapter, meals, "Apple", "snack")
    form = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)
    form.assign("2024-05-16", "snack", apple.id)
    form.submit()

    assert form.request_delete() is True
    assert form.confirm_delete() is True
    assert adapter.fetch_all(WEEKLY_PLANS, owner) == []
    assert form.week_start == date(2024, 5, 12)


def test_saving_a_week_twice_from_a_stale_store_keeps_one_plan(adapter, owner, today):
    meals, plans = _stores(adapter, owner)
    oats = _add_meal(adapter, meals, "Oats", "breakfast")
    first = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)
    second = WeeklyPlanForm(adapter, store=plans, meal_store=meals, today=today)

    first.assign("2024-05-13", "breakfast", oats.id)
    assert first.submit() is True
    second.assign("2024-05-14", "breakfast", oats.id)
    assert second.submit() is True

    [plan] = adapter.fetch_all(WEEKLY_PLANS, owner)
    assert second.entity_id == first.entity_id == plan.id
    assert plan.days == {"2024-05-14": {"breakfast": oats.id}}
