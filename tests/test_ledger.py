"""
Tests for the box ledger

Every test runs against an in-memory store; FlakyKeyValueStore
simulates a medium that fails reads or writes.
"""

import asyncio
import json
from decimal import Decimal

import pytest

from classfund.audit import AuditLogger
from classfund.ledger import (
    BoxLedger,
    DuplicateBoxError,
    LedgerNotLoadedError,
    LedgerSyncError,
)
from classfund.models.audit import AuditEventType
from classfund.models.box import Box, serialize_boxes
from classfund.services.storage import (
    InMemoryKeyValueStore,
    KeyValueBoxStorage,
    StorageError,
)


def stored_boxes(store, key="boxes"):
    return json.loads(store.snapshot()[key])


def event_types(audit_storage):
    events = asyncio.run(audit_storage.get_recent_events())
    return [e.event_type for e in reversed(events)]


class TestInitialize:
    """Tests for loading the ledger."""

    def test_empty_store(self, ledger):
        """An absent key loads as an empty ledger."""
        asyncio.run(ledger.initialize())
        assert ledger.is_loaded is True
        assert ledger.get_all() == ()
        assert ledger.sync_status.pending_sync is False
        assert ledger.sync_status.last_synced_at is not None

    def test_loads_stored_boxes_in_order(self):
        boxes = [
            Box(id="1", name="A", balance=Decimal("10")),
            Box(id="2", name="B", balance=Decimal("20")),
        ]
        store = InMemoryKeyValueStore({"boxes": serialize_boxes(boxes)})
        ledger = BoxLedger(KeyValueBoxStorage(store))
        asyncio.run(ledger.initialize())
        assert ledger.get_all() == tuple(boxes)
        assert len(ledger) == 2

    def test_read_failure_starts_empty(self, store, ledger, audit_storage):
        """A failed read still finishes loading, with nothing in it."""
        store.fail_reads = True
        asyncio.run(ledger.initialize())
        assert ledger.is_loaded is True
        assert ledger.get_all() == ()
        assert AuditEventType.LEDGER_LOAD_FAILED in event_types(audit_storage)

    def test_corrupt_blob_starts_empty(self, audit_storage):
        store = InMemoryKeyValueStore({"boxes": "this is not json"})
        ledger = BoxLedger(KeyValueBoxStorage(store), AuditLogger(audit_storage))
        asyncio.run(ledger.initialize())
        assert ledger.is_loaded is True
        assert ledger.get_all() == ()
        assert event_types(audit_storage) == [AuditEventType.LEDGER_LOAD_FAILED]

    def test_reinitialize_replaces_memory(self, store, ledger):
        """Reloading discards unsaved in-memory changes."""
        asyncio.run(ledger.initialize())
        store.fail_writes = True
        with pytest.raises(LedgerSyncError):
            asyncio.run(ledger.add(Box(id="1", name="A")))
        assert len(ledger) == 1

        store.fail_writes = False
        asyncio.run(ledger.initialize())
        assert ledger.get_all() == ()
        assert ledger.sync_status.pending_sync is False

    def test_long_names_in_blob_are_kept(self, audit_storage):
        """A long name does not make the other boxes disappear."""
        store = InMemoryKeyValueStore({
            "boxes": serialize_boxes([
                Box(id="1", name="A", balance=Decimal("1")),
                Box(id="2", name="x" * 201, balance=Decimal("2")),
            ])
        })
        ledger = BoxLedger(KeyValueBoxStorage(store), AuditLogger(audit_storage))
        asyncio.run(ledger.initialize())
        assert [b.id for b in ledger.get_all()] == ["1", "2"]

        asyncio.run(ledger.add(Box(id="3", name="C")))

        assert [r["id"] for r in stored_boxes(store)] == ["1", "2", "3"]
        assert stored_boxes(store)[1]["name"] == "x" * 201
        assert AuditEventType.LEDGER_LOAD_FAILED not in event_types(audit_storage)

    def test_duplicate_ids_in_blob_are_kept(self):
        """Existing duplicates are loaded as they are."""
        store = InMemoryKeyValueStore({
            "boxes": '[{"id":"1","name":"A","balance":"1"},{"id":"1","name":"B","balance":"2"}]'
        })
        ledger = BoxLedger(KeyValueBoxStorage(store))
        asyncio.run(ledger.initialize())
        assert [b.name for b in ledger.get_all()] == ["A", "B"]
        assert ledger.get("1").name == "A"


class TestAdd:
    """Tests for adding boxes."""

    def test_add_to_empty_ledger(self, store, ledger):
        """Adding to an empty ledger persists a one-element collection."""
        asyncio.run(ledger.initialize())
        box = Box(id="1", name="Trip Fund", balance=Decimal("0"))

        assert asyncio.run(ledger.add(box)) == box

        assert ledger.get_all() == (box,)
        assert stored_boxes(store) == [{"id": "1", "name": "Trip Fund", "balance": "0"}]

    def test_add_appends_at_end(self, store, ledger):
        asyncio.run(ledger.initialize())
        first = Box(id="1", name="A", balance=Decimal("10"))
        second = Box(id="2", name="B", balance=Decimal("20"))
        asyncio.run(ledger.add(first))
        asyncio.run(ledger.add(second))
        assert ledger.get_all() == (first, second)
        assert [r["id"] for r in stored_boxes(store)] == ["1", "2"]
        assert store.writes == 2

    def test_add_without_balance(self, store, ledger):
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="A")))
        assert stored_boxes(store) == [{"id": "1", "name": "A", "balance": None}]

    def test_add_duplicate_id_is_rejected(self, store, ledger, audit_storage):
        """A second box with an existing id changes nothing."""
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="A")))

        with pytest.raises(DuplicateBoxError) as exc_info:
            asyncio.run(ledger.add(Box(id="1", name="Other")))

        assert exc_info.value.box_id == "1"
        assert [b.name for b in ledger.get_all()] == ["A"]
        assert store.writes == 1
        assert AuditEventType.BOX_REJECTED in event_types(audit_storage)

    def test_add_before_initialize(self, ledger):
        with pytest.raises(LedgerNotLoadedError):
            asyncio.run(ledger.add(Box(id="1", name="A")))

    def test_add_records_audit_events(self, ledger, audit_storage):
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="A")))
        assert event_types(audit_storage) == [
            AuditEventType.LEDGER_LOADED,
            AuditEventType.BOX_CREATED,
            AuditEventType.LEDGER_SAVED,
        ]


class TestEdit:
    """Tests for editing boxes."""

    def _loaded(self, ledger):
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="A", balance=Decimal("10"))))
        asyncio.run(ledger.add(Box(id="2", name="B", balance=Decimal("20"))))

    def test_edit_replaces_in_place(self, store, ledger):
        """The edited box keeps its position; the others are untouched."""
        self._loaded(ledger)

        assert asyncio.run(ledger.edit(Box(id="2", name="B2", balance=Decimal("25")))) is True

        assert ledger.get_all() == (
            Box(id="1", name="A", balance=Decimal("10")),
            Box(id="2", name="B2", balance=Decimal("25")),
        )
        assert stored_boxes(store) == [
            {"id": "1", "name": "A", "balance": "10"},
            {"id": "2", "name": "B2", "balance": "25"},
        ]

    def test_edit_first_box_keeps_order(self, ledger):
        self._loaded(ledger)
        asyncio.run(ledger.edit(Box(id="1", name="A2", balance=Decimal("10"))))
        assert [b.id for b in ledger.get_all()] == ["1", "2"]

    def test_edit_unknown_id_changes_nothing(self, store, ledger, audit_storage):
        """No match is not an error, and the collection is still saved."""
        self._loaded(ledger)
        before = ledger.get_all()
        writes_before = store.writes

        assert asyncio.run(ledger.edit(Box(id="99", name="X"))) is False

        assert ledger.get_all() == before
        assert store.writes == writes_before + 1
        assert [r["id"] for r in stored_boxes(store)] == ["1", "2"]
        assert AuditEventType.BOX_EDIT_TARGET_MISSING in event_types(audit_storage)

    def test_edit_before_initialize(self, ledger):
        with pytest.raises(LedgerNotLoadedError):
            asyncio.run(ledger.edit(Box(id="1", name="A")))

    def test_edit_records_previous_and_current(self, ledger, audit_storage):
        self._loaded(ledger)
        asyncio.run(ledger.edit(Box(id="1", name="A2", balance=Decimal("11"))))
        events = asyncio.run(audit_storage.get_recent_events())
        updated = next(e for e in events if e.event_type == AuditEventType.BOX_UPDATED)
        assert updated.entity_id == "1"
        assert updated.details["previous"] == {"name": "A", "balance": "10"}
        assert updated.details["current"] == {"name": "A2", "balance": "11"}


class TestSaveFailure:
    """Tests for writes that fail after memory changed."""

    def test_add_failure_keeps_box_in_memory(self, store, ledger):
        """Memory is ahead of storage until a later save succeeds."""
        asyncio.run(ledger.initialize())
        store.fail_writes = True
        box = Box(id="1", name="A")

        with pytest.raises(LedgerSyncError) as exc_info:
            asyncio.run(ledger.add(box))

        assert isinstance(exc_info.value.__cause__, StorageError)
        assert ledger.get_all() == (box,)
        assert "boxes" not in store.snapshot()
        assert ledger.sync_status.pending_sync is True
        assert ledger.sync_status.last_error == "disk full"

    def test_edit_failure_keeps_edit_in_memory(self, store, ledger):
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="A", balance=Decimal("10"))))
        store.fail_writes = True

        with pytest.raises(LedgerSyncError):
            asyncio.run(ledger.edit(Box(id="1", name="A2", balance=Decimal("10"))))

        assert ledger.get("1").name == "A2"
        assert stored_boxes(store)[0]["name"] == "A"

    def test_next_successful_save_catches_up(self, store, ledger):
        """A later save writes everything, including the earlier change."""
        asyncio.run(ledger.initialize())
        store.fail_writes = True
        with pytest.raises(LedgerSyncError):
            asyncio.run(ledger.add(Box(id="1", name="A")))

        store.fail_writes = False
        asyncio.run(ledger.add(Box(id="2", name="B")))

        assert [r["id"] for r in stored_boxes(store)] == ["1", "2"]
        assert ledger.sync_status.pending_sync is False
        assert ledger.sync_status.last_error is None

    def test_failure_keeps_last_synced_time(self, store, ledger):
        asyncio.run(ledger.initialize())
        synced_at = ledger.sync_status.last_synced_at
        store.fail_writes = True
        with pytest.raises(LedgerSyncError):
            asyncio.run(ledger.add(Box(id="1", name="A")))
        assert ledger.sync_status.last_synced_at == synced_at

    def test_failure_is_audited(self, store, ledger, audit_storage):
        asyncio.run(ledger.initialize())
        store.fail_writes = True
        with pytest.raises(LedgerSyncError):
            asyncio.run(ledger.add(Box(id="1", name="A")))
        events = asyncio.run(audit_storage.get_recent_events())
        assert events[0].event_type == AuditEventType.SAVE_FAILED
        assert events[0].error_message == "disk full"


class TestReads:
    """Tests for get_all and get."""

    def test_get_all_is_a_snapshot(self, ledger):
        """Changing the ledger does not change an earlier snapshot."""
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="A")))
        snapshot = ledger.get_all()
        asyncio.run(ledger.add(Box(id="2", name="B")))
        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1
        assert len(ledger.get_all()) == 2

    def test_get_by_id(self, ledger):
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="A")))
        assert ledger.get("1") == Box(id="1", name="A")
        assert ledger.get("missing") is None


class TestRestart:
    """Tests that a saved collection comes back after a restart."""

    def test_reload_with_new_ledger(self, store):
        ledger = BoxLedger(KeyValueBoxStorage(store))
        asyncio.run(ledger.initialize())
        asyncio.run(ledger.add(Box(id="1", name="Trip Fund", balance=Decimal("0"))))
        asyncio.run(ledger.edit(Box(id="1", name="Trip Fund", balance=Decimal("42.10"))))

        restarted = BoxLedger(KeyValueBoxStorage(store))
        asyncio.run(restarted.initialize())
        assert restarted.get_all() == ledger.get_all()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
