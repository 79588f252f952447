"""
Shared fixtures.

No test touches the real data directory: file-backed tests use tmp_path,
everything else uses in-memory stores.
"""

import pytest

from classfund.audit import AuditLogger
from classfund.ledger import BoxLedger
from classfund.services.storage import (
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
    KeyValueBoxStorage,
    StorageError,
)


class FlakyKeyValueStore(InMemoryKeyValueStore):
    """In-memory store that can be told to fail reads or writes."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    async def get_item(self, key):
        if self.fail_reads:
            raise StorageError("storage unavailable")
        return await super().get_item(key)

    async def set_item(self, key, value):
        if self.fail_writes:
            raise StorageError("disk full")
        self.writes += 1
        await super().set_item(key, value)


@pytest.fixture
def store():
    return FlakyKeyValueStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def ledger(store, audit_storage):
    return BoxLedger(
        storage=KeyValueBoxStorage(store),
        audit_logger=AuditLogger(audit_storage),
    )
