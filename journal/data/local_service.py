import logging
import threading
from collections import defaultdict

from journal.constants import IMMUTABLE_FIELDS, LOCAL_TABLE_PREFIX, NATURAL_KEYS
from journal.data.service import DataService, new_id, utc_now_iso
from journal.errors import NotFound

logger = logging.getLogger(__name__)


class LocalDataService(DataService):
    """Data service used when no remote backend is configured.

    Each owner's rows of a table are persisted as one JSON list in the
    key-value cache, read on every call and rewritten on every mutation.
    Change notifications are delivered in-process right after the write.
    """

    def __init__(self, cache, user_getter=None):
        super().__init__(user_getter)
        self.cache = cache
        self._listeners = defaultdict(list)
        self._lock = threading.RLock()

    def _key(self, table, owner_id):
        return f"{LOCAL_TABLE_PREFIX}::{owner_id}::{table}"

    def _load(self, table, owner_id):
        rows = self.cache.get_json(self._key(table, owner_id), default=[])
        return [row for row in rows if isinstance(row, dict)] if isinstance(rows, list) else []

    def _save(self, table, owner_id, rows):
        self.cache.set_json(self._key(table, owner_id), rows)

    def select(self, table, owner_id):
        rows = self._load(table, owner_id)
        # Newest first inside a date, the same order the backend returns.
        rows.sort(key=lambda row: row.get("created_at") or "", reverse=True)
        rows.sort(key=lambda row: row.get("date") or row.get("week_start") or "", reverse=True)
        return rows

    def select_one(self, table, owner_id, row_id):
        for row in self._load(table, owner_id):
            if row.get("id") == row_id:
                return row
        return None

    def insert(self, table, row):
        owner_id = row.get("user_id")
        if not owner_id:
            raise ValueError("user_id is required")
        now = utc_now_iso()
        record = dict(row)
        record["id"] = record.get("id") or new_id()
        record["created_at"] = now
        record["updated_at"] = now
        natural_key = NATURAL_KEYS.get(table)
        with self._lock:
            rows = self._load(table, owner_id)
            existing = None
            if natural_key:
                existing = next((item for item in rows if item.get(natural_key) == record.get(natural_key)), None)
            if existing is not None:
                record["id"] = existing["id"]
                record["created_at"] = existing.get("created_at") or now
                existing.clear()
                existing.update(record)
            else:
                rows.insert(0, record)
            self._save(table, owner_id, rows)
        self._notify(table)
        return dict(record)

    def update(self, table, owner_id, row_id, patch):
        clean = {k: v for k, v in (patch or {}).items() if k not in IMMUTABLE_FIELDS}
        with self._lock:
            rows = self._load(table, owner_id)
            for row in rows:
                if row.get("id") == row_id:
                    row.update(clean)
                    row["updated_at"] = utc_now_iso()
                    self._save(table, owner_id, rows)
                    record = dict(row)
                    break
            else:
                raise NotFound(table, row_id)
        self._notify(table)
        return record

    def delete(self, table, owner_id, row_id):
        with self._lock:
            rows = self._load(table, owner_id)
            remaining = [row for row in rows if row.get("id") != row_id]
            if len(remaining) == len(rows):
                return False
            self._save(table, owner_id, remaining)
        self._notify(table)
        return True

    def subscribe(self, table, callback):
        with self._lock:
            self._listeners[table].append(callback)

        def _teardown():
            with self._lock:
                if callback in self._listeners[table]:
                    self._listeners[table].remove(callback)

        return _teardown

    def listener_count(self, table):
        with self._lock:
            return len(self._listeners[table])

    def _notify(self, table):
        with self._lock:
            listeners = list(self._listeners[table])
        for callback in listeners:
            try:
                callback()
            except Exception:
                logger.exception("Change listener for %s failed", table)
