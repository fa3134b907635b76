"""Unit tests for StateSynchronizer.

Covers loading with fallbacks, read-after-update, debounced persistence,
failed writes and changes made before the first load.
"""

import asyncio
import logging
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.unit.conftest import NOW, make_user
from yume.core.errors import DocumentStoreError, DocumentValidationError, NotFoundError
from yume.models import AppDocument, PendingUser
from yume.services import users
from yume.services.document_store import RemoteDocumentStore
from yume.services.state_sync import StateSynchronizer, parse_document, revive_dates


def _rename(user_id: int, username: str):
    return lambda d: users.update_user(d, user_id, username=username)


@pytest.fixture
def failing_store():
    store = MagicMock(spec=RemoteDocumentStore)
    store.fetch = AsyncMock(side_effect=DocumentStoreError("connection refused"))
    store.save = AsyncMock()
    return store


class TestReviveDates:
    """Test ISO instant revival on the raw JSON."""

    def test_converts_nested_instants(self):
        raw = {"posts": [{"createdAt": "2024-05-01T12:00:00.000Z", "title": "Hi"}]}
        revived = revive_dates(raw)
        created = revived["posts"][0]["createdAt"]
        assert isinstance(created, datetime)
        assert created.year == 2024 and created.tzinfo is not None
        assert revived["posts"][0]["title"] == "Hi"

    def test_input_is_left_untouched(self):
        raw = {"when": "2024-05-01T12:00:00Z"}
        revive_dates(raw)
        assert raw == {"when": "2024-05-01T12:00:00Z"}

    def test_plain_dates_and_numbers_are_kept(self):
        raw = {"day": "2024-05-01", "year": 2024, "flag": True}
        assert revive_dates(raw) == raw


class TestParseDocument:
    """Test building the AppDocument from stored JSON."""

    def test_none_is_empty_document(self):
        assert parse_document(None) == AppDocument.empty()

    def test_null_collections_become_empty(self):
        doc = parse_document({"users": None, "media": None, "posts": None, "pendingUsers": None})
        assert doc.users == [] and doc.media == [] and doc.posts == [] and doc.pending_users == []

    def test_settings_merge_with_defaults(self):
        doc = parse_document({"settings": {"siteName": "Night TV", "maintenanceMode": {"enabled": True}}})
        assert doc.settings.site_name == "Night TV"
        assert doc.settings.maintenance_mode.enabled is True
        assert doc.settings.maintenance_mode.message  # default message filled in
        assert doc.settings.player.auto_play is True
        assert doc.settings.player.auto_next is True

    def test_date_shaped_text_field_still_loads(self):
        raw = {
            "media": [
                {
                    "id": 1,
                    "title": "2024-05-01T12:00:00Z",
                    "comments": [],
                }
            ]
        }
        doc = parse_document(raw)
        assert doc.media[0].title == "2024-05-01T12:00:00Z"

    def test_wrong_shape_raises_validation_error(self):
        with pytest.raises(DocumentValidationError):
            parse_document({"users": "nobody"})

    def test_unknown_fields_survive_a_round_trip(self):
        doc = parse_document({"users": [], "featureFlags": {"beta": True}})
        assert doc.to_json()["featureFlags"] == {"beta": True}


class TestLoad:
    """Test the initial load and its fallbacks."""

    async def test_load_success(self, mock_store, document):
        sync = StateSynchronizer(mock_store)
        loaded = await sync.load()
        assert sync.loaded
        assert [u.username for u in loaded.users] == [u.username for u in document.users]
        mock_store.save.assert_not_called()

    async def test_unreachable_store_falls_back_to_empty(self, failing_store, caplog):
        sync = StateSynchronizer(failing_store)
        with caplog.at_level(logging.WARNING):
            doc = await sync.load()
        assert doc == AppDocument.empty()
        assert not sync.loaded
        assert "empty document" in caplog.text

    async def test_unreadable_document_falls_back_to_empty(self, mock_store):
        mock_store.fetch.return_value = {"users": 42}
        sync = StateSynchronizer(mock_store)
        await sync.load()
        assert sync.read() == AppDocument.empty()
        assert not sync.loaded

    async def test_missing_document_loads_empty(self, mock_store):
        mock_store.fetch.return_value = None
        sync = StateSynchronizer(mock_store)
        await sync.load()
        assert sync.loaded
        assert sync.read() == AppDocument.empty()

    async def test_failed_load_never_persists(self, failing_store):
        sync = StateSynchronizer(failing_store, debounce_seconds=0.01)
        await sync.load()
        sync.update(lambda d: users.add_pending_user(d, _pending()))
        await asyncio.sleep(0.05)
        await sync.flush()
        failing_store.save.assert_not_called()
        assert len(sync.read().pending_users) == 1

    async def test_retry_after_failed_load_persists_interim_changes(self, mock_store, document):
        mock_store.fetch.side_effect = [DocumentStoreError("timeout"), document.to_json()]
        sync = StateSynchronizer(mock_store, debounce_seconds=0.01)
        await sync.load()
        assert not sync.loaded

        sync.update(lambda d: users.add_pending_user(d, _pending()))
        await sync.retry_load(retry_seconds=0.01)

        assert sync.loaded
        assert mock_store.fetch.await_count == 2
        assert len(sync.read().users) == 3
        await sync.flush()
        saved = mock_store.save.await_args.args[0]
        assert [p["username"] for p in saved["pendingUsers"]] == ["Carol"]
        assert len(saved["users"]) == 3

    async def test_retry_backs_off_until_the_store_answers(self, mock_store, document):
        mock_store.fetch.side_effect = [
            DocumentStoreError("timeout"),
            DocumentStoreError("timeout"),
            DocumentStoreError("timeout"),
            document.to_json(),
        ]
        sync = StateSynchronizer(mock_store)
        await sync.load()
        await sync.retry_load(retry_seconds=0.01, max_retry_seconds=0.02)
        assert sync.loaded
        assert mock_store.fetch.await_count == 4

    async def test_retry_is_a_no_op_once_loaded(self, sync, mock_store):
        await sync.retry_load(retry_seconds=60)
        mock_store.fetch.assert_awaited_once()


def _pending():
    return PendingUser(
        username="Carol",
        email="carol@example.com",
        password="secret1",
        verification_token="tok",
        token_expires=NOW,
    )


class TestUpdate:
    """Test applying transforms to the in-memory document."""

    async def test_read_after_update(self, sync):
        sync.update(_rename(2, "Alicia"))
        assert users.get_user(sync.read(), 2).username == "Alicia"

    async def test_read_with_selector(self, sync):
        assert sync.read(lambda d: len(d.users)) == 3

    async def test_failing_transform_leaves_state_unchanged(self, sync):
        before = sync.read()
        with pytest.raises(Exception):
            sync.update(_rename(99, "Ghost"))
        assert sync.read() is before
        assert not sync.pending_save

    async def test_transform_must_return_document(self, sync):
        with pytest.raises(TypeError):
            sync.update(lambda d: None)

    async def test_previous_snapshot_is_not_modified(self, sync):
        before = sync.read()
        sync.update(_rename(2, "Alicia"))
        assert users.get_user(before, 2).username == "Alice"


class TestDebouncedSave:
    """Test that bursts of changes become one PUT."""

    async def test_burst_is_coalesced_into_one_put(self, mock_store):
        sync = StateSynchronizer(mock_store, debounce_seconds=0.05)
        await sync.load()

        sync.update(_rename(2, "A1"))
        sync.update(_rename(2, "A2"))
        sync.update(_rename(2, "A3"))
        assert sync.pending_save
        mock_store.save.assert_not_called()

        await asyncio.sleep(0.2)

        mock_store.save.assert_awaited_once()
        saved = mock_store.save.await_args.args[0]
        assert saved["users"][1]["username"] == "A3"
        assert not sync.pending_save

    async def test_saved_json_uses_stored_keys(self, mock_store):
        sync = StateSynchronizer(mock_store, debounce_seconds=0.01)
        await sync.load()
        sync.update(lambda d: users.add_pending_user(d, _pending()))
        await sync.flush()
        saved = mock_store.save.await_args.args[0]
        assert "pendingUsers" in saved
        assert saved["pendingUsers"][0]["tokenExpires"].startswith("2024-05-01T12:00:00")

    async def test_flush_writes_immediately(self, mock_store):
        sync = StateSynchronizer(mock_store, debounce_seconds=60)
        await sync.load()
        sync.update(_rename(2, "Alicia"))
        await sync.flush()
        mock_store.save.assert_awaited_once()
        assert not sync.pending_save

    async def test_flush_without_changes_does_nothing(self, sync, mock_store):
        await sync.flush()
        mock_store.save.assert_not_called()

    async def test_deleting_last_entity_is_persisted(self, mock_store):
        mock_store.fetch.return_value = AppDocument(users=[make_user(1, "Solo")]).to_json()
        sync = StateSynchronizer(mock_store, debounce_seconds=0.01)
        await sync.load()
        sync.update(lambda d: users.delete_user(d, 1))
        await sync.flush()
        saved = mock_store.save.await_args.args[0]
        assert saved["users"] == []

    async def test_failed_put_keeps_state(self, mock_store, caplog):
        mock_store.save.side_effect = DocumentStoreError("503 Service Unavailable")
        sync = StateSynchronizer(mock_store, debounce_seconds=0.01)
        await sync.load()

        sync.update(_rename(2, "Alicia"))
        with caplog.at_level(logging.ERROR):
            await sync.flush()

        assert users.get_user(sync.read(), 2).username == "Alicia"
        assert "Document not saved" in caplog.text
        # Not retried until the next change
        await sync.flush()
        assert mock_store.save.await_count == 1

    async def test_update_during_put_starts_a_new_cycle(self, mock_store):
        started = asyncio.Event()
        gate = asyncio.Event()
        payloads = []

        async def gated_save(doc):
            payloads.append(doc["users"][1]["username"])
            started.set()
            await gate.wait()

        mock_store.save.side_effect = gated_save
        sync = StateSynchronizer(mock_store, debounce_seconds=0.01)
        await sync.load()

        sync.update(_rename(2, "First"))
        await asyncio.wait_for(started.wait(), timeout=1)
        # The PUT is in flight with no debounce timer left, yet the task is still held
        assert not sync.pending_save
        assert len(sync._save_tasks) == 1

        sync.update(_rename(2, "Second"))
        await asyncio.sleep(0.05)
        assert payloads == ["First"]

        gate.set()
        await asyncio.sleep(0.05)
        assert payloads == ["First", "Second"]
        assert not sync._save_tasks


class TestChangesBeforeLoad:
    """Test transforms applied while the initial load is still outstanding."""

    async def test_early_changes_are_replayed_over_loaded_document(self, mock_store):
        sync = StateSynchronizer(mock_store, debounce_seconds=0.01)
        sync.update(lambda d: users.add_pending_user(d, _pending()))
        assert len(sync.read().pending_users) == 1

        await sync.load()

        doc = sync.read()
        assert len(doc.users) == 3
        assert [p.username for p in doc.pending_users] == ["Carol"]
        await sync.flush()
        mock_store.save.assert_awaited_once()

    async def test_early_change_that_no_longer_applies_is_dropped(self, mock_store, caplog):
        mock_store.fetch.return_value = AppDocument(users=[make_user(7, "Late")]).to_json()
        sync = StateSynchronizer(mock_store, debounce_seconds=0.01)
        # Valid against the empty document, fails against the loaded one
        sync.update(lambda d: users.update_user(d, 1, username="X") if d.users else d)

        with caplog.at_level(logging.ERROR):
            await sync.load()

        assert sync.loaded
        assert [u.username for u in sync.read().users] == ["Late"]
        assert "Dropping change" in caplog.text
        await sync.flush()
