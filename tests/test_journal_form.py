from unittest import mock

from journal.constants import JOURNAL_ENTRIES
from journal.errors import RemoteUnavailable
from journal.forms.base import FormState
from journal.forms.journal_form import JournalForm
from journal.store import EntityStore


def _messages(form):
    return [(notice.level, notice.message) for notice in form.drain_notices()]


def test_new_form_defaults(adapter, today):
    form = JournalForm(adapter, today=today)
    assert form.is_new
    assert form.state == FormState.IDLE
    assert form.draft == {"date": "2024-05-15", "content": "", "energy": 5, "productivity": 5}


def test_empty_content_is_rejected_without_remote_calls(adapter, today):
    spy = mock.Mock(wraps=adapter)
    form = JournalForm(spy, today=today)
    form.set_field("content", "   ")

    assert form.submit() is False
    assert form.state == FormState.EDITING
    assert form.error == "Please write something about your day"
    assert spy.require_owner.call_count == 0
    assert spy.create.call_count == 0
    assert spy.update.call_count == 0


def test_create_resets_form_and_fires_on_save(adapter, owner, today):
    on_save = mock.Mock()
    form = JournalForm(adapter, on_save=on_save, today=today)
    form.update_fields({"content": "Went hiking", "energy": 14, "productivity": -2})

    assert form.submit() is True
    on_save.assert_called_once_with()
    assert ("success", "New journal entry created") in _messages(form)
    assert form.is_new
    assert form.state == FormState.IDLE
    assert FormState.SAVED in form.history

    [entry] = adapter.fetch_all(JOURNAL_ENTRIES, owner)
    assert entry.content == "Went hiking"
    assert entry.energy == 10
    assert entry.productivity == 1


def test_edit_keeps_refreshed_data(adapter, today):
    created = adapter.create(JOURNAL_ENTRIES, {"date": "2024-05-01", "content": "Old", "energy": 3, "productivity": 4})
    form = JournalForm(adapter, entity_id=created.id, today=today)
    assert form.state == FormState.EDITING
    assert form.draft["content"] == "Old"

    form.set_field("content", "New")
    assert form.submit() is True
    assert ("success", "Journal entry updated") in _messages(form)
    assert form.entity_id == created.id
    assert form.state == FormState.EDITING
    assert form.draft == {"date": "2024-05-01", "content": "New", "energy": 3, "productivity": 4}


def test_loading_a_missing_entry_starts_a_new_draft(adapter, today):
    form = JournalForm(adapter, entity_id="gone", today=today)
    assert form.is_new
    assert form.state == FormState.IDLE
    assert [level for level, _ in _messages(form)] == ["warning"]


def test_failed_load_falls_back_to_editable_defaults(adapter, today):
    with mock.patch.object(adapter, "fetch_one", side_effect=RemoteUnavailable("offline")):
        form = JournalForm(adapter, entity_id="abc", today=today)
    assert form.entity_id == "abc"
    assert form.state == FormState.EDITING
    assert form.error == "offline"
    assert form.draft["content"] == ""


def test_submit_without_session_shows_notice(adapter, holder, today):
    holder.sign_out()
    form = JournalForm(adapter, today=today)
    form.set_field("content", "Hello")

    assert form.submit() is False
    assert form.state == FormState.EDITING
    assert form.error == "Please sign in to save your changes"
    assert form.draft["content"] == "Hello"


def test_remote_failure_goes_through_errored_state(adapter, today):
    form = JournalForm(adapter, today=today)
    form.set_field("content", "Hello")
    with mock.patch.object(adapter, "create", side_effect=RemoteUnavailable("Journal service unreachable")):
        assert form.submit() is False
    assert form.history[-2:] == [FormState.ERRORED, FormState.EDITING]
    assert form.is_submitting is False
    assert form.draft["content"] == "Hello"


def test_response_after_unmount_is_ignored(adapter, owner, today):
    form = JournalForm(adapter, today=today)
    form.set_field("content", "Late")
    original_create = adapter.create

    def create_then_unmount(kind, payload):
        form.unmount()
        return original_create(kind, payload)

    with mock.patch.object(adapter, "create", side_effect=create_then_unmount):
        assert form.submit() is True
    assert form.drain_notices() == []
    assert form.draft["content"] == "Late"
    assert len(adapter.fetch_all(JOURNAL_ENTRIES, owner)) == 1


def test_set_field_rejects_unknown_fields(adapter, today):
    form = JournalForm(adapter, today=today)
    try:
        form.set_field("mood", "happy")
    except KeyError:
        pass
    else:
        raise AssertionError("unknown field accepted")


def test_delete_requires_confirmation_and_clears_selection(adapter, owner, today):
    store = EntityStore(JOURNAL_ENTRIES, owner_id=owner)
    created = adapter.create(JOURNAL_ENTRIES, {"date": "2024-05-01", "content": "Bye"})
    store.upsert_many(adapter.fetch_all(JOURNAL_ENTRIES, owner))
    store.set_active(created.id)
    on_save = mock.Mock()
    form = JournalForm(adapter, store=store, entity_id=created.id, on_save=on_save, today=today)

    assert form.confirm_delete() is False
    assert form.request_delete() is True
    form.cancel_delete()
    assert form.confirm_delete() is False

    form.request_delete()
    assert form.confirm_delete() is True
    assert store.active_id is None
    assert form.is_new
    on_save.assert_called_once_with()
    assert ("success", "Journal entry deleted") in _messages(form)
    assert adapter.fetch_all(JOURNAL_ENTRIES, owner) == []


def test_new_form_cannot_request_delete(adapter, today):
    form = JournalForm(adapter, today=today)
    assert form.request_delete() is False


def test_submit_while_submitting_is_ignored(adapter, owner, today):
    form = JournalForm(adapter, today=today)
    form.set_field("content", "Once")
    original_create = adapter.create
    nested = []

    def create_and_resubmit(kind, payload):
        nested.append(form.submit())
        return original_create(kind, payload)

    with mock.patch.object(adapter, "create", side_effect=create_and_resubmit) as create:
        assert form.submit() is True
    assert nested == [False]
    create.assert_called_once()
    assert len(adapter.fetch_all(JOURNAL_ENTRIES, owner)) == 1


def test_confirm_delete_is_refused_outside_editing(adapter, owner, today):
    created = adapter.create(JOURNAL_ENTRIES, {"date": "2024-05-01", "content": "Keep"})
    form = JournalForm(adapter, entity_id=created.id, today=today)
    form.set_field("content", "Keep me")
    assert form.request_delete() is True
    original_update = adapter.update
    during_submit = []

    def update_and_confirm(kind, entity_id, payload):
        during_submit.append(form.confirm_delete())
        return original_update(kind, entity_id, payload)

    with mock.patch.object(adapter, "update", side_effect=update_and_confirm), \
            mock.patch.object(adapter, "remove", wraps=adapter.remove) as remove:
        assert form.submit() is True
    assert during_submit == [False]
    remove.assert_not_called()
    assert [entry.id for entry in adapter.fetch_all(JOURNAL_ENTRIES, owner)] == [created.id]
