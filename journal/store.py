import logging
import threading

from journal.constants import CACHE_SNAPSHOT_PREFIX
from journal.models import entity_from_row
from journal.state.selection import SelectionController

logger = logging.getLogger(__name__)


class EntityStore:
    """Most recently fetched snapshot of one entity kind for one owner.

    The snapshot is only ever replaced wholesale (``upsert_many``); drafts
    live in the form controllers until the remote write resolves. When a
    ``cache`` is given, every replace is written through to it so the last
    snapshot can be shown at startup, but the cache is never read back once
    a fresh fetch has happened.
    """

    def __init__(self, kind, owner_id=None, cache=None, selection=None):
        self.kind = kind
        self.owner_id = owner_id
        self.selection = selection or SelectionController()
        self._cache = cache
        self._items = []
        self._by_id = {}
        self._stale = False
        self._lock = threading.RLock()

    @property
    def cache_key(self):
        return f"{CACHE_SNAPSHOT_PREFIX}::{self.owner_id or 'anonymous'}::{self.kind}"

    @property
    def active_id(self):
        return self.selection.active_id

    def list(self):
        with self._lock:
            return sorted(self._items, key=lambda item: item.sort_date, reverse=True)

    def get_by_id(self, entity_id):
        if entity_id is None:
            return None
        with self._lock:
            return self._by_id.get(entity_id)

    def get_active(self):
        return self.get_by_id(self.active_id)

    def ids(self):
        with self._lock:
            return set(self._by_id)

    def upsert_many(self, entities):
        items = list(entities or [])
        with self._lock:
            self._items = items
            self._by_id = {item.id: item for item in items if item.id is not None}
            self._stale = False
            known_ids = set(self._by_id)
        self.selection.reconcile(known_ids)
        self._write_through(items)

    def set_active(self, entity_id):
        self.selection.select(entity_id)

    def mark_stale(self):
        with self._lock:
            self._stale = True

    @property
    def stale(self):
        return self._stale

    def load_cached(self):
        if self._cache is None:
            return False
        rows = self._cache.get_json(self.cache_key, default=None)
        if not isinstance(rows, list):
            return False
        entities = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                entities.append(entity_from_row(self.kind, row))
            except Exception:
                logger.warning("Skipping unreadable cached %s row", self.kind)
        with self._lock:
            self._items = entities
            self._by_id = {item.id: item for item in entities if item.id is not None}
        return True

    def _write_through(self, items):
        if self._cache is None:
            return
        try:
            self._cache.set_json(self.cache_key, [item.to_row() for item in items])
        except Exception as exc:
            logger.warning("Failed to persist %s snapshot: %s", self.kind, exc)

    def __len__(self):
        with self._lock:
            return len(self._items)
