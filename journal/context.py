import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from journal.config import api_base_url, backend_token, cache_database_url, change_poll_seconds, remote_enabled
from journal.constants import ENTITY_KINDS, JOURNAL_ENTRIES, MEALS, WEEKLY_PLANS
from journal.data.api_client import ApiDataService
from journal.data.feed import EntityFeed
from journal.data.local_cache import KeyValueCache
from journal.data.local_service import LocalDataService
from journal.data.sync import RemoteSyncAdapter
from journal.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    owner_id: str
    adapter: RemoteSyncAdapter
    stores: Dict[str, EntityStore]
    feeds: Dict[str, EntityFeed] = field(default_factory=dict)
    remote: bool = False
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def entries(self):
        return self.stores[JOURNAL_ENTRIES]

    @property
    def meals(self):
        return self.stores[MEALS]

    @property
    def plans(self):
        return self.stores[WEEKLY_PLANS]

    def feed(self, kind) -> Optional[EntityFeed]:
        return self.feeds.get(kind)

    def mount(self):
        for feed in self.feeds.values():
            feed.mount()
        return self

    def unmount(self):
        for feed in self.feeds.values():
            feed.unmount()

    def refresh(self, kind=None):
        kinds = [kind] if kind else list(self.feeds)
        return all([self.feeds[item].refresh() for item in kinds])

    def refresh_stale(self):
        return [kind for kind, feed in self.feeds.items() if feed.refresh_if_stale()]

    def errors(self):
        return {kind: feed.last_error for kind, feed in self.feeds.items() if feed.last_error}

    def get(self, key, default=None):
        return self.extras.get(key, default)


def create_cache(database_url=None):
    return KeyValueCache(database_url or cache_database_url())


def create_data_service(user_getter, cache=None):
    if remote_enabled():
        logger.info("Using remote backend at %s", api_base_url())
        return ApiDataService(
            api_base_url(),
            backend_token(),
            user_getter=user_getter,
            poll_interval=change_poll_seconds(),
        )
    logger.info("No backend configured; storing data locally")
    return LocalDataService(cache or create_cache(), user_getter=user_getter)


def build_context(service, owner_id, cache=None, refetch_on_change=None):
    """Wire stores and feeds for one signed-in owner.

    ``cache`` only serves as a snapshot write-through for remote services;
    a local service already keeps its rows there. Unless told otherwise,
    remote change notifications (delivered on the polling thread) only mark
    stores stale, while local ones refetch right away.
    """
    remote = not isinstance(service, LocalDataService)
    if refetch_on_change is None:
        refetch_on_change = not remote
    adapter = RemoteSyncAdapter(service)
    snapshot_cache = cache if remote else None
    stores = {kind: EntityStore(kind, owner_id=owner_id, cache=snapshot_cache) for kind in ENTITY_KINDS}
    if snapshot_cache is not None:
        for store in stores.values():
            store.load_cached()
    feeds = {kind: EntityFeed(adapter, store, refetch_on_change=refetch_on_change) for kind, store in stores.items()}
    return AppContext(owner_id=owner_id, adapter=adapter, stores=stores, feeds=feeds, remote=remote)
