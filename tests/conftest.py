from datetime import date

import pytest

from journal.auth import SessionHolder
from journal.data.local_cache import KeyValueCache
from journal.data.local_service import LocalDataService
from journal.data.sync import RemoteSyncAdapter

TODAY = date(2024, 5, 15)


@pytest.fixture
def cache():
    kv = KeyValueCache("sqlite://")
    yield kv
    kv.close()


@pytest.fixture
def holder():
    session_holder = SessionHolder()
    session_holder.sign_in("Ana Souza", "Ana@Example.com")
    return session_holder


@pytest.fixture
def owner(holder):
    return holder.current().user_id


@pytest.fixture
def service(cache, holder):
    return LocalDataService(cache, user_getter=holder.current)


@pytest.fixture
def adapter(service):
    return RemoteSyncAdapter(service)


@pytest.fixture
def today():
    return TODAY
