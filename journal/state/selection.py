import logging
import threading

logger = logging.getLogger(__name__)


class SelectionController:
    """Which entity is open in a form, kept apart from the entity list."""

    def __init__(self):
        self._active_id = None
        self._lock = threading.Lock()

    @property
    def active_id(self):
        return self._active_id

    def select(self, entity_id):
        with self._lock:
            self._active_id = entity_id or None

    def clear(self):
        self.select(None)

    def clear_if(self, entity_id):
        with self._lock:
            if entity_id is not None and self._active_id == entity_id:
                self._active_id = None
                return True
        return False

    def reconcile(self, known_ids):
        """Drop the selection when a refresh no longer contains it."""
        with self._lock:
            if self._active_id is None or self._active_id in known_ids:
                return False
            logger.info("Active selection %s disappeared after refresh; clearing.", self._active_id)
            self._active_id = None
            return True
