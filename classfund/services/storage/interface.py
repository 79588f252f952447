"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Swap the local file store for another key-value medium later
2. Use in-memory storage for testing
3. Keep the ledger decoupled from how bytes reach the disk

There are two layers:
- KeyValueStorageInterface: get/set of one text blob under a key
- BoxStorageInterface: load/save of the whole box collection

The interface is intentionally simple. The ledger always reads and
writes the full collection; there are no per-box operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from classfund.models.audit import AuditEvent
from classfund.models.box import Box


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for a durable key-value medium.

    Values are UTF-8 text. A write either fully replaces the previous
    value or leaves it untouched.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored text, or None if the key was never written

        Raises:
            StorageError: If the medium cannot be read
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The storage key
            value: Text to store

        Raises:
            StorageError: If the write fails (the previous value is kept)
        """
        pass


class BoxStorageInterface(ABC):
    """
    Abstract interface for persisting the box collection.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load_boxes(self) -> list[Box]:
        """
        Load the full box collection.

        Returns:
            Boxes in stored order; empty if nothing was stored yet

        Raises:
            StorageError: If the medium is unavailable
            CorruptDataError: If the stored data cannot be decoded
        """
        pass

    @abstractmethod
    async def save_boxes(self, boxes: Sequence[Box]) -> None:
        """
        Persist the full box collection as one atomic write.

        Args:
            boxes: The complete ordered collection

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


# The name the ledger documentation uses for storage failures.
StoreError = StorageError


class CorruptDataError(StorageError):
    """Stored data exists but cannot be decoded."""
    pass


class ConnectionError(StorageError):
    """Could not open or prepare the storage medium."""
    pass
