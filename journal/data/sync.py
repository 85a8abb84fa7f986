"""Remote sync adapter: store-level intents to data service calls.

The adapter never mutates an ``EntityStore``. Callers refetch after a write
or after a change notification and replace the store's snapshot wholesale;
a change notification triggered by the caller's own write may arrive before
or after the write returns, so refetches must tolerate seeing the same data
twice.
"""

import logging
import threading

from journal.constants import ENTITY_KINDS, IMMUTABLE_FIELDS
from journal.errors import JournalError, NotAuthenticated, NotFound, RemoteFailure, Unauthorized
from journal.models import entity_from_row

logger = logging.getLogger(__name__)


class Subscription:
    """Handle of a change listener; ``unsubscribe`` may be called any number of times."""

    def __init__(self, kind, teardown):
        self.kind = kind
        self._teardown = teardown
        self._lock = threading.Lock()
        self._active = True

    @property
    def active(self):
        return self._active

    def unsubscribe(self):
        with self._lock:
            if not self._active:
                return False
            self._active = False
            teardown, self._teardown = self._teardown, None
        try:
            teardown()
        except Exception as exc:
            logger.warning("Teardown of %s subscription failed: %s", self.kind, exc)
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()


def _check_kind(kind):
    if kind not in ENTITY_KINDS:
        raise ValueError(f"Unknown entity kind: {kind}")


def _wrap_failure(action, kind, exc):
    if isinstance(exc, JournalError):
        return exc
    logger.exception("Unexpected failure during %s on %s", action, kind)
    return RemoteFailure(f"Could not {action} {kind.replace('_', ' ')}: {exc}")


class RemoteSyncAdapter:
    def __init__(self, service):
        self.service = service

    def current_owner(self):
        session = self.service.current_user()
        return session.user_id if session else None

    def require_owner(self):
        owner_id = self.current_owner()
        if not owner_id:
            raise NotAuthenticated()
        return owner_id

    def fetch_all(self, kind, owner_id):
        _check_kind(kind)
        session_owner = self.current_owner()
        if not session_owner or session_owner != owner_id:
            raise Unauthorized("Entities can only be listed for the signed-in user", status_code=401)
        try:
            rows = self.service.select(kind, owner_id)
        except Exception as exc:
            raise _wrap_failure("load", kind, exc)
        return [entity_from_row(kind, row) for row in rows if row.get("user_id") in (None, owner_id)]

    def fetch_one(self, kind, entity_id):
        _check_kind(kind)
        owner_id = self.current_owner()
        if not owner_id:
            raise Unauthorized("No signed-in user", status_code=401)
        try:
            row = self.service.select_one(kind, owner_id, entity_id)
        except Exception as exc:
            raise _wrap_failure("load", kind, exc)
        if not row:
            raise NotFound(kind, entity_id)
        return entity_from_row(kind, row)

    def create(self, kind, payload):
        _check_kind(kind)
        # Session is re-read here, not at form mount: the user may have signed out since.
        owner_id = self.require_owner()
        row = {k: v for k, v in dict(payload or {}).items() if k not in IMMUTABLE_FIELDS}
        row["user_id"] = owner_id
        try:
            created = self.service.insert(kind, row)
        except Exception as exc:
            raise _wrap_failure("save", kind, exc)
        logger.info("Created %s %s", kind, created.get("id"))
        return entity_from_row(kind, created)

    def update(self, kind, entity_id, partial_payload):
        _check_kind(kind)
        owner_id = self.require_owner()
        patch = {k: v for k, v in dict(partial_payload or {}).items() if k not in IMMUTABLE_FIELDS}
        try:
            updated = self.service.update(kind, owner_id, entity_id, patch)
        except Exception as exc:
            raise _wrap_failure("update", kind, exc)
        if not updated:
            raise NotFound(kind, entity_id)
        logger.info("Updated %s %s (%s)", kind, entity_id, ", ".join(sorted(patch)) or "no fields")
        return entity_from_row(kind, updated)

    def remove(self, kind, entity_id):
        _check_kind(kind)
        owner_id = self.require_owner()
        try:
            removed = self.service.delete(kind, owner_id, entity_id)
        except Exception as exc:
            raise _wrap_failure("delete", kind, exc)
        if not removed:
            logger.info("%s %s was already gone", kind, entity_id)
        return removed

    def subscribe_to_changes(self, kind, on_change):
        _check_kind(kind)
        teardown = self.service.subscribe(kind, on_change)
        return Subscription(kind, teardown)
