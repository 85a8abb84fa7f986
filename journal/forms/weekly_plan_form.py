from datetime import date, timedelta

from journal.constants import MEAL_TYPES, PLAN_SLOTS, WEEKLY_PLANS
from journal.errors import ValidationError
from journal.forms.base import FormController, FormState
from journal.models import normalize_day, normalize_day_plan, week_days, week_start_for


class WeeklyPlanForm(FormController):
    """Meal assignments for one Sunday-anchored week.

    Plans only reference meal ids. Deleting a meal leaves the stored plan
    untouched; ``prune_missing_meals`` drops dangling ids from the draft so
    the next save cleans them up.
    """

    kind = WEEKLY_PLANS
    created_message = "Meal plan saved"
    updated_message = "Meal plan updated"
    deleted_message = "Meal plan cleared"
    reset_after_create = False

    def __init__(self, adapter, store=None, meal_store=None, week_start=None, entity_id=None, on_save=None, today=None):
        self.meal_store = meal_store
        self.week_start = week_start_for(week_start or today or date.today())
        super().__init__(adapter, store=store, entity_id=entity_id, on_save=on_save, today=today)
        if not entity_id:
            self.open_week(self.week_start)

    def defaults(self):
        return {
            "week_start": self.week_start.isoformat(),
            "days": {day: {} for day in week_days(self.week_start)},
        }

    def draft_from_entity(self, entity):
        self.week_start = week_start_for(entity.week_start)
        days = {day: {} for day in week_days(self.week_start)}
        for day, plan in entity.days.items():
            days[day] = normalize_day_plan(plan)
        return {"week_start": self.week_start.isoformat(), "days": days}

    @property
    def days(self):
        return week_days(self.week_start)

    # Week navigation.

    def open_week(self, week_start):
        self.week_start = week_start_for(week_start)
        self.confirming_delete = False
        plan = self._find_plan(self.week_start.isoformat())
        if plan is None:
            self.reset()
            return False
        self.entity_id = plan.id
        self.draft = self.draft_from_entity(plan)
        self.error = None
        self._transition(FormState.EDITING)
        return True

    def previous_week(self):
        return self.open_week(self.week_start - timedelta(days=7))

    def next_week(self):
        return self.open_week(self.week_start + timedelta(days=7))

    def current_week(self):
        return self.open_week(self.today)

    def _find_plan(self, week_start_iso):
        if self.store is None:
            return None
        for plan in self.store.list():
            if plan.week_start == week_start_iso:
                return plan
        return None

    # Editing.

    def _known_meal(self, meal_id):
        if self.meal_store is None:
            return None
        return self.meal_store.get_by_id(meal_id)

    def assign(self, day, meal_type, meal_id):
        if not self.can_edit():
            return False
        day_iso = normalize_day(day)
        try:
            if day_iso not in self.days:
                raise ValidationError(f"{day} is not part of this week", field="day")
            if meal_type not in MEAL_TYPES:
                raise ValidationError(f"Unknown meal type: {meal_type}", field="type")
            if meal_id and self.meal_store is not None:
                meal = self._known_meal(meal_id)
                if meal is None:
                    raise ValidationError("That meal no longer exists", field="meal")
                if meal.type != meal_type:
                    raise ValidationError(f"{meal.name} is not a {meal_type}", field="meal")
        except ValidationError as exc:
            self._notify("error", exc.message)
            return False

        plan = dict(self.draft["days"].get(day_iso) or {})
        slot = PLAN_SLOTS[meal_type]
        if slot == "snacks":
            if meal_id:
                plan["snacks"] = [meal_id]
            else:
                plan.pop("snacks", None)
        elif meal_id:
            plan[slot] = meal_id
        else:
            plan.pop(slot, None)
        self.draft["days"][day_iso] = plan
        self._touch()
        return True

    def set_notes(self, day, notes):
        if not self.can_edit():
            return False
        day_iso = normalize_day(day)
        if day_iso not in self.days:
            self._notify("error", f"{day} is not part of this week")
            return False
        plan = dict(self.draft["days"].get(day_iso) or {})
        clean = str(notes or "")
        if clean.strip():
            plan["notes"] = clean
        else:
            plan.pop("notes", None)
        self.draft["days"][day_iso] = plan
        self._touch()
        return True

    def meal_id_for(self, day, meal_type):
        plan = self.draft["days"].get(normalize_day(day)) or {}
        slot = PLAN_SLOTS.get(meal_type)
        if slot == "snacks":
            snacks = plan.get("snacks") or []
            return snacks[0] if snacks else None
        return plan.get(slot) if slot else None

    def resolve_day(self, day):
        """Meals assigned to ``day`` by type; dangling ids resolve to ``None``."""
        return {meal_type: self._resolve(self.meal_id_for(day, meal_type)) for meal_type in MEAL_TYPES}

    def _resolve(self, meal_id):
        if not meal_id:
            return None
        return self._known_meal(meal_id)

    def prune_missing_meals(self, known_ids=None):
        if known_ids is None:
            if self.meal_store is None:
                return 0
            known_ids = self.meal_store.ids()
        removed = 0
        for day, plan in self.draft["days"].items():
            clean = dict(plan)
            for slot in ("breakfast", "lunch", "dinner"):
                if clean.get(slot) and clean[slot] not in known_ids:
                    clean.pop(slot)
                    removed += 1
            if clean.get("snacks"):
                kept = [meal_id for meal_id in clean["snacks"] if meal_id in known_ids]
                removed += len(clean["snacks"]) - len(kept)
                if kept:
                    clean["snacks"] = kept
                else:
                    clean.pop("snacks")
            self.draft["days"][day] = clean
        if removed:
            self._touch()
        return removed

    def build_payload(self):
        week_start = normalize_day(self.draft.get("week_start"))
        if not week_start:
            raise ValidationError("Invalid week", field="week_start")
        allowed_days = set(week_days(week_start))
        days = {}
        for day, plan in (self.draft.get("days") or {}).items():
            if day not in allowed_days:
                raise ValidationError(f"{day} is not part of this week", field="days")
            clean = normalize_day_plan(plan)
            if clean:
                days[day] = clean
        return {"week_start": week_start, "days": days}
