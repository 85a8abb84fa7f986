import pytest

from journal.constants import JOURNAL_ENTRIES, MEALS
from journal.data.local_cache import KeyValueCache, normalize_database_url
from journal.errors import NotFound


def test_normalize_database_url():
    assert normalize_database_url("postgres://u:p@host/db") == "postgresql+psycopg2://u:p@host/db"
    assert (
        normalize_database_url("postgresql://u:p@host/db?sslmode=require&channel_binding=require")
        == "postgresql+psycopg2://u:p@host/db?sslmode=require"
    )
    assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


def test_key_value_cache_round_trip(cache):
    assert cache.get("missing") is None
    cache.set("k", "v1")
    cache.set("k", "v2")
    assert cache.get("k") == "v2"
    cache.delete("k")
    assert cache.get("k") is None


def test_key_value_cache_json(cache):
    cache.set_json("items", [{"name": "Açaí"}])
    assert cache.get_json("items") == [{"name": "Açaí"}]
    cache.set("broken", "{not json")
    assert cache.get_json("broken", default=[]) == []


def test_file_cache_persists_between_instances(tmp_path):
    url = f"sqlite:///{tmp_path / 'cache.db'}"
    first = KeyValueCache(url)
    first.set_json("k", {"a": 1})
    first.close()
    second = KeyValueCache(url)
    assert second.get_json("k") == {"a": 1}
    second.close()


def test_insert_assigns_id_and_timestamps(service, owner):
    row = service.insert(JOURNAL_ENTRIES, {"user_id": owner, "date": "2024-01-01", "content": "Hi"})
    assert row["id"]
    assert row["created_at"] == row["updated_at"]
    assert service.select_one(JOURNAL_ENTRIES, owner, row["id"])["content"] == "Hi"


def test_insert_requires_owner(service):
    with pytest.raises(ValueError):
        service.insert(JOURNAL_ENTRIES, {"date": "2024-01-01"})


def test_rows_are_scoped_per_owner(service, owner):
    service.insert(MEALS, {"user_id": owner, "date": "2024-01-01", "name": "Oats"})
    service.insert(MEALS, {"user_id": "bo@example.com", "date": "2024-01-01", "name": "Toast"})
    assert [row["name"] for row in service.select(MEALS, owner)] == ["Oats"]
    assert [row["name"] for row in service.select(MEALS, "bo@example.com")] == ["Toast"]


def test_select_orders_by_date_descending(service, owner):
    for day in ("2024-01-02", "2024-01-03", "2024-01-01"):
        service.insert(JOURNAL_ENTRIES, {"user_id": owner, "date": day, "content": day})
    assert [row["date"] for row in service.select(JOURNAL_ENTRIES, owner)] == ["2024-01-03", "2024-01-02", "2024-01-01"]


def test_update_keeps_immutable_fields(service, owner):
    row = service.insert(JOURNAL_ENTRIES, {"user_id": owner, "date": "2024-01-01", "content": "Hi"})
    updated = service.update(
        JOURNAL_ENTRIES, owner, row["id"], {"id": "other", "user_id": "bo@example.com", "content": "Hello"}
    )
    assert updated["id"] == row["id"]
    assert updated["user_id"] == owner
    assert updated["content"] == "Hello"
    assert updated["created_at"] == row["created_at"]


def test_update_of_foreign_row_is_not_found(service, owner):
    row = service.insert(JOURNAL_ENTRIES, {"user_id": owner, "date": "2024-01-01", "content": "Hi"})
    with pytest.raises(NotFound):
        service.update(JOURNAL_ENTRIES, "bo@example.com", row["id"], {"content": "x"})


def test_delete_reports_whether_a_row_was_removed(service, owner):
    row = service.insert(MEALS, {"user_id": owner, "date": "2024-01-01", "name": "Oats"})
    assert service.delete(MEALS, owner, row["id"]) is True
    assert service.delete(MEALS, owner, row["id"]) is False


def test_listeners_are_notified_after_writes(service, owner):
    calls = []
    teardown = service.subscribe(MEALS, lambda: calls.append("meals"))
    service.subscribe(JOURNAL_ENTRIES, lambda: calls.append("journal"))
    row = service.insert(MEALS, {"user_id": owner, "date": "2024-01-01", "name": "Oats"})
    service.update(MEALS, owner, row["id"], {"name": "Porridge"})
    service.delete(MEALS, owner, row["id"])
    assert calls == ["meals", "meals", "meals"]

    teardown()
    teardown()
    assert service.listener_count(MEALS) == 0


def test_failing_listener_does_not_break_writes(service, owner):
    def boom():
        raise RuntimeError("listener crashed")

    service.subscribe(MEALS, boom)
    row = service.insert(MEALS, {"user_id": owner, "date": "2024-01-01", "name": "Oats"})
    assert service.select_one(MEALS, owner, row["id"]) is not None
