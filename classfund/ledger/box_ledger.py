"""
Box Ledger

Owns the authoritative in-memory collection of boxes and keeps it in
step with the box storage.

DESIGN DECISION: Optimistic in-memory update, then persist.
Every mutation changes memory first and then saves the full collection.
If the save fails, memory is NOT rolled back: the UI stays responsive,
the failure is raised to the caller, and `sync_status.pending_sync`
stays True until a later save succeeds.

There is no internal locking. Callers serialize mutations; if two saves
overlap, the last one to finish is what ends up on disk.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from classfund.audit import AuditLogger
from classfund.models.box import Box, SyncStatus
from classfund.services.storage import BoxStorageInterface, StorageError


class BoxLedger:
    """
    The in-memory + persisted collection of boxes.

    Insertion order is the display order. Boxes are looked up by a
    linear scan on id; collections stay small (a class has a few boxes).
    """

    def __init__(
        self,
        storage: BoxStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the ledger.

        Args:
            storage: Box storage, owned by the application root
            audit_logger: Optional audit logger for mutations and failures
        """
        self._storage = storage
        self._audit_logger = audit_logger
        self._boxes: list[Box] = []
        self._is_loaded = False
        self._sync_status = SyncStatus()
        self._logger = structlog.get_logger("classfund.ledger")

    @property
    def is_loaded(self) -> bool:
        return self._is_loaded

    @property
    def sync_status(self) -> SyncStatus:
        return self._sync_status

    async def initialize(self, correlation_id: Optional[UUID] = None) -> None:
        """
        Load the collection from storage.

        Never raises StorageError: on failure the ledger starts empty so the
        UI can show its empty state instead of waiting forever.
        `is_loaded` is True when this returns, whatever happened.
        """
        self._is_loaded = False
        self._boxes = []
        self._sync_status = SyncStatus()

        try:
            boxes = await self._storage.load_boxes()
        except StorageError as e:
            self._logger.error("ledger_load_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_ledger_load_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
        else:
            self._boxes = list(boxes)
            self._sync_status = SyncStatus(last_synced_at=datetime.utcnow())
            duplicates = self._duplicate_ids()
            if duplicates:
                self._logger.warning("ledger_duplicate_ids", box_ids=duplicates)
            if self._audit_logger:
                await self._audit_logger.log_ledger_loaded(
                    box_count=len(self._boxes),
                    correlation_id=correlation_id,
                )
        finally:
            self._is_loaded = True

    async def add(
        self,
        box: Box,
        correlation_id: Optional[UUID] = None,
    ) -> Box:
        """
        Append a new box and persist the collection.

        Args:
            box: A box whose id is not in the ledger yet

        Returns:
            The added box

        Raises:
            LedgerNotLoadedError: If called before initialize() finished
            DuplicateBoxError: If a box with the same id exists (nothing changes)
            LedgerSyncError: If the save failed (the box stays in memory)
        """
        self._require_loaded()

        if self._index_of(box.id) is not None:
            if self._audit_logger:
                await self._audit_logger.log_box_rejected(
                    box_id=box.id,
                    reason="duplicate id",
                    correlation_id=correlation_id,
                )
            raise DuplicateBoxError(box.id)

        self._boxes.append(box)
        self._logger.info("box_added", box_id=box.id, box_count=len(self._boxes))
        if self._audit_logger:
            await self._audit_logger.log_box_created(box, correlation_id=correlation_id)

        await self._persist(correlation_id)
        return box

    async def edit(
        self,
        box: Box,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Replace the box with the same id, keeping its position.

        An unknown id leaves the collection unchanged; it is not an error.
        The collection is saved either way.

        Returns:
            True if a box was replaced, False if no box had this id

        Raises:
            LedgerNotLoadedError: If called before initialize() finished
            LedgerSyncError: If the save failed (the edit stays in memory)
        """
        self._require_loaded()

        index = self._index_of(box.id)
        if index is None:
            self._logger.info("box_edit_no_match", box_id=box.id)
            if self._audit_logger:
                await self._audit_logger.log_edit_target_missing(
                    box_id=box.id,
                    correlation_id=correlation_id,
                )
        else:
            previous = self._boxes[index]
            self._boxes[index] = box
            self._logger.info("box_edited", box_id=box.id, position=index)
            if self._audit_logger:
                await self._audit_logger.log_box_updated(
                    previous=previous,
                    current=box,
                    correlation_id=correlation_id,
                )

        await self._persist(correlation_id)
        return index is not None

    def get_all(self) -> tuple[Box, ...]:
        """Snapshot of the collection in display order."""
        return tuple(self._boxes)

    def get(self, box_id: str) -> Optional[Box]:
        """Find a box by id."""
        index = self._index_of(box_id)
        return None if index is None else self._boxes[index]

    def __len__(self) -> int:
        return len(self._boxes)

    async def _persist(self, correlation_id: Optional[UUID]) -> None:
        """Save the current collection; record and raise on failure."""
        snapshot = tuple(self._boxes)
        try:
            await self._storage.save_boxes(snapshot)
        except StorageError as e:
            self._sync_status = SyncStatus(
                pending_sync=True,
                last_error=str(e),
                last_synced_at=self._sync_status.last_synced_at,
            )
            self._logger.error("ledger_save_failed", error=str(e), box_count=len(snapshot))
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    box_count=len(snapshot),
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise LedgerSyncError(
                "Change kept on this device but not saved; it may be lost on restart"
            ) from e

        self._sync_status = SyncStatus(last_synced_at=datetime.utcnow())
        if self._audit_logger:
            await self._audit_logger.log_ledger_saved(
                box_count=len(snapshot),
                correlation_id=correlation_id,
            )

    def _require_loaded(self) -> None:
        if not self._is_loaded:
            raise LedgerNotLoadedError("Ledger has not finished loading")

    def _index_of(self, box_id: str) -> Optional[int]:
        for index, box in enumerate(self._boxes):
            if box.id == box_id:
                return index
        return None

    def _duplicate_ids(self) -> list[str]:
        seen = set()
        duplicates = []
        for box in self._boxes:
            if box.id in seen and box.id not in duplicates:
                duplicates.append(box.id)
            seen.add(box.id)
        return duplicates


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class LedgerSyncError(LedgerError):
    """
    Memory was updated but the save failed.

    The original StorageError is chained as __cause__.
    """
    pass


class DuplicateBoxError(LedgerError):
    """A box with this id is already in the ledger."""

    def __init__(self, box_id: str):
        super().__init__(f"Box id already exists: {box_id}")
        self.box_id = box_id


class LedgerNotLoadedError(LedgerError):
    """A mutation was attempted before the ledger finished loading."""
    pass
