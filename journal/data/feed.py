import logging

from journal.errors import JournalError

logger = logging.getLogger(__name__)


class EntityFeed:
    """Keeps one store in step with the remote rows of its kind.

    While mounted, any change notification either refetches immediately
    (``refetch_on_change``) or only marks the store stale so the next
    render refetches.
    """

    def __init__(self, adapter, store, refetch_on_change=True):
        self.adapter = adapter
        self.store = store
        self.refetch_on_change = refetch_on_change
        self.last_error = None
        self._subscription = None
        self._mounted = False

    @property
    def kind(self):
        return self.store.kind

    @property
    def mounted(self):
        return self._mounted

    def refresh(self):
        try:
            entities = self.adapter.fetch_all(self.kind, self.store.owner_id)
        except JournalError as exc:
            self.last_error = exc.message
            logger.warning("Refresh of %s failed: %s", self.kind, exc.message)
            return False
        self.last_error = None
        self.store.upsert_many(entities)
        return True

    def refresh_if_stale(self):
        if self.store.stale:
            return self.refresh()
        return False

    def _on_change(self):
        if not self._mounted:
            return
        if self.refetch_on_change:
            self.refresh()
        else:
            self.store.mark_stale()

    def mount(self):
        if self._mounted:
            return self
        self._mounted = True
        self._subscription = self.adapter.subscribe_to_changes(self.kind, self._on_change)
        self.refresh()
        return self

    def unmount(self):
        self._mounted = False
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()
