from journal.constants import DEFAULT_RATING, JOURNAL_ENTRIES
from journal.errors import ValidationError
from journal.forms.base import FormController
from journal.models import clamp_rating, normalize_day


class JournalForm(FormController):
    kind = JOURNAL_ENTRIES
    created_message = "New journal entry created"
    updated_message = "Journal entry updated"
    deleted_message = "Journal entry deleted"

    def defaults(self):
        return {
            "date": self.today.isoformat(),
            "content": "",
            "energy": DEFAULT_RATING,
            "productivity": DEFAULT_RATING,
        }

    def draft_from_entity(self, entity):
        return {
            "date": entity.date,
            "content": entity.content,
            "energy": entity.energy,
            "productivity": entity.productivity,
        }

    def build_payload(self):
        content = str(self.draft.get("content") or "").strip()
        if not content:
            raise ValidationError("Please write something about your day", field="content")
        day = normalize_day(self.draft.get("date"))
        if not day:
            raise ValidationError("Please pick a valid date", field="date")
        return {
            "date": day,
            "content": content,
            "energy": clamp_rating(self.draft.get("energy")),
            "productivity": clamp_rating(self.draft.get("productivity")),
        }
