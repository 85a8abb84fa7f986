"""Draft state machine shared by the journal, meal and weekly plan forms.

    IDLE (new) / EDITING --submit--> SUBMITTING --ok--> SAVED --> IDLE | EDITING
                                        |--invalid---------------> EDITING
                                        '--remote error--> ERRORED --> EDITING
    LOADING --ok--> EDITING, --failure--> EDITING with defaults

No remote call happens outside ``load``, ``submit`` and ``confirm_delete``,
and every failure ends up in ``notices`` instead of being raised.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from journal.errors import JournalError, NotAuthenticated, NotFound, ValidationError

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SAVED = "saved"
    ERRORED = "errored"


@dataclass
class Notice:
    level: str
    message: str


class FormController:
    kind = None
    created_message = "Saved"
    updated_message = "Updated"
    deleted_message = "Deleted"
    reset_after_create = True

    def __init__(self, adapter, store=None, entity_id=None, on_save=None, today=None):
        self.adapter = adapter
        self.store = store
        self.on_save = on_save
        self.today = today or date.today()
        self.entity_id = None
        self.state = FormState.IDLE
        self.history = [FormState.IDLE]
        self.draft = self.defaults()
        self.error = None
        self.notices = []
        self.is_loading = False
        self.is_submitting = False
        self.confirming_delete = False
        self._mounted = True
        if entity_id:
            self.load(entity_id)

    # Hooks for subclasses.

    def defaults(self):
        raise NotImplementedError

    def draft_from_entity(self, entity):
        raise NotImplementedError

    def build_payload(self):
        """Validate ``self.draft``; return the remote payload or raise ``ValidationError``."""
        raise NotImplementedError

    # State helpers.

    @property
    def is_new(self):
        return self.entity_id is None

    @property
    def mounted(self):
        return self._mounted

    def _transition(self, state):
        self.state = state
        self.history.append(state)

    def _notify(self, level, message):
        self.notices.append(Notice(level, message))
        if level == "error":
            self.error = message

    def drain_notices(self):
        notices, self.notices = self.notices, []
        return notices

    def unmount(self):
        self._mounted = False

    def reset(self):
        self.entity_id = None
        self.draft = self.defaults()
        self.error = None
        self.confirming_delete = False
        self._transition(FormState.IDLE)

    def can_edit(self):
        return self.state not in (FormState.LOADING, FormState.SUBMITTING)

    def _touch(self):
        self.error = None
        if self.state != FormState.EDITING:
            self._transition(FormState.EDITING)

    def set_field(self, name, value):
        if not self.can_edit():
            return False
        if name not in self.draft:
            raise KeyError(name)
        self.draft[name] = value
        self._touch()
        return True

    def update_fields(self, values):
        for name, value in (values or {}).items():
            self.set_field(name, value)

    # Remote transitions.

    def load(self, entity_id):
        self.is_loading = True
        self._transition(FormState.LOADING)
        try:
            entity = self.adapter.fetch_one(self.kind, entity_id)
        except NotFound:
            self.is_loading = False
            if not self._mounted:
                return False
            logger.info("%s %s not found; starting a new draft", self.kind, entity_id)
            self.reset()
            self._notify("warning", "That item no longer exists; starting a new one.")
            return False
        except JournalError as exc:
            self.is_loading = False
            if not self._mounted:
                return False
            self.entity_id = entity_id
            self._notify("error", exc.message)
            self._transition(FormState.EDITING)
            return False
        self.is_loading = False
        if not self._mounted:
            return False
        self.entity_id = entity.id
        self.draft = self.draft_from_entity(entity)
        self.error = None
        self._transition(FormState.EDITING)
        return True

    def submit(self):
        if self.is_submitting or self.state == FormState.LOADING:
            return False
        self._transition(FormState.SUBMITTING)
        try:
            payload = self.build_payload()
        except ValidationError as exc:
            self._notify("error", exc.message)
            self._transition(FormState.EDITING)
            return False

        self.is_submitting = True
        creating = self.is_new
        try:
            self.adapter.require_owner()
            if creating:
                saved = self.adapter.create(self.kind, payload)
            else:
                saved = self.adapter.update(self.kind, self.entity_id, payload)
        except NotAuthenticated as exc:
            return self._fail(exc.message, errored=False)
        except JournalError as exc:
            return self._fail(exc.message, errored=True)
        finally:
            self.is_submitting = False

        if not self._mounted:
            return True
        self._transition(FormState.SAVED)
        self._notify("success", self.created_message if creating else self.updated_message)
        self._fire_on_save()
        if creating and self.reset_after_create:
            self.reset()
        else:
            self.entity_id = saved.id
            self.draft = self.draft_from_entity(saved)
            self.error = None
            self._transition(FormState.EDITING)
        return True

    def _fail(self, message, errored):
        if not self._mounted:
            return False
        self._notify("error", message)
        if errored:
            self._transition(FormState.ERRORED)
        self._transition(FormState.EDITING)
        return False

    def _fire_on_save(self):
        if self.on_save is None:
            return
        try:
            self.on_save()
        except Exception:
            logger.exception("on_save callback for %s failed", self.kind)

    # Delete.

    def request_delete(self):
        if self.is_new or self.state != FormState.EDITING:
            return False
        self.confirming_delete = True
        return True

    def cancel_delete(self):
        self.confirming_delete = False

    def confirm_delete(self):
        if not self.confirming_delete or self.is_new:
            return False
        if self.is_submitting or self.state != FormState.EDITING:
            return False
        entity_id = self.entity_id
        self.confirming_delete = False
        self.is_submitting = True
        try:
            self.adapter.remove(self.kind, entity_id)
        except JournalError as exc:
            return self._fail(exc.message, errored=True)
        finally:
            self.is_submitting = False
        if self.store is not None:
            self.store.selection.clear_if(entity_id)
        if not self._mounted:
            return True
        self._notify("success", self.deleted_message)
        self._fire_on_save()
        self.reset()
        return True
