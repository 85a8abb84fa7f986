from journal.constants import MEAL_TYPES, MEALS, NUTRITION_FIELDS
from journal.errors import ValidationError
from journal.forms.base import FormController
from journal.models import normalize_day, parse_amount


class MealForm(FormController):
    kind = MEALS
    created_message = "Meal added successfully"
    updated_message = "Meal updated successfully"
    deleted_message = "Meal deleted successfully"

    def defaults(self):
        return {
            "type": "breakfast",
            "name": "",
            "calories": 0,
            "protein": 0,
            "carbs": 0,
            "fat": 0,
            "notes": "",
            "date": self.today.isoformat(),
        }

    def draft_from_entity(self, entity):
        return {
            "type": entity.type,
            "name": entity.name,
            "calories": entity.calories,
            "protein": entity.protein,
            "carbs": entity.carbs,
            "fat": entity.fat,
            "notes": entity.notes,
            "date": entity.date,
        }

    def build_payload(self):
        name = str(self.draft.get("name") or "").strip()
        if not name:
            raise ValidationError("Please enter a meal name", field="name")
        meal_type = str(self.draft.get("type") or "").strip().lower()
        if meal_type not in MEAL_TYPES:
            raise ValidationError(f"Unknown meal type: {self.draft.get('type')}", field="type")
        day = normalize_day(self.draft.get("date"))
        if not day:
            raise ValidationError("Please pick a valid date", field="date")
        payload = {
            "date": day,
            "type": meal_type,
            "name": name,
            "notes": str(self.draft.get("notes") or "").strip(),
        }
        for key in NUTRITION_FIELDS:
            amount = parse_amount(self.draft.get(key))
            if amount < 0:
                raise ValidationError(f"{key.title()} cannot be negative", field=key)
            payload[key] = amount
        return payload
