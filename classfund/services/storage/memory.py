"""
In-Memory Storage Implementation

Used for tests and for running the app without touching the disk
(CLASSFUND_STORAGE_BACKEND=memory). Nothing survives a restart.
"""

from typing import Optional

from classfund.models.audit import AuditEvent
from classfund.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStorageInterface,
)


class InMemoryKeyValueStore(KeyValueStorageInterface):
    """Key-value store held in a dict."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored, for inspection."""
        return dict(self._items)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit list held in memory."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
