"""Selection and detail-view state for the box list screen.

Call context:
    The Streamlit app calls ``BoxSelectionVM`` for everything it shows or
    changes on the boxes screen. The view model reads and writes through
    ``BoxLedger``; it keeps only the current selection, which is never
    persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, Optional
from uuid import UUID

import structlog

from classfund.ledger import BoxLedger
from classfund.models.box import Box, SyncStatus, create_box_id
from classfund.viewmodels.amount_format import Amount, balance_label, format_amount


class SelectionState(str, Enum):
    NO_SELECTION = "no_selection"
    HAS_SELECTION = "has_selection"


class NoSelectionError(Exception):
    """An edit was requested but no box was given or selected."""
    pass


EditBox = Callable[[Box], Awaitable[bool]]


@dataclass(frozen=True)
class EditRequest:
    """A box to edit plus the operation that saves the edited version.

    The view collects the new field values itself and calls ``submit``.
    """

    box: Box
    edit: EditBox

    async def submit(
        self,
        name: Optional[str] = None,
        balance: Optional[Decimal] = None,
    ) -> Box:
        updated = self.box.with_changes(name=name, balance=balance)
        await self.edit(updated)
        return updated


class BoxSelectionVM:
    """Holds the selected box and exposes the ledger to the view.

    Responsibilities
    - Track at most one selected box (cleared on every reload)
    - Format balances for display (never touching stored values)
    - Delegate add/edit to the ledger; keep the selection in step with edits
    """

    def __init__(
        self,
        ledger: BoxLedger,
        currency_symbol: str = "R$",
        on_selection_changed: Optional[Callable[[Optional[Box]], None]] = None,
    ):
        self._ledger = ledger
        self._currency_symbol = currency_symbol
        self._selected: Optional[Box] = None
        self.on_selection_changed = on_selection_changed
        self._logger = structlog.get_logger("classfund.viewmodels")

    # ---- Selection API (called by View) ----
    @property
    def selected(self) -> Optional[Box]:
        return self._selected

    @property
    def state(self) -> SelectionState:
        if self._selected is None:
            return SelectionState.NO_SELECTION
        return SelectionState.HAS_SELECTION

    def select(self, box: Optional[Box]) -> None:
        """Select a box for the detail view; None clears it.

        The box is not checked against the ledger.
        """
        self._selected = box
        self._logger.debug("box_selection_changed", box_id=box.id if box else None)
        if self.on_selection_changed:
            self.on_selection_changed(box)

    # ---- Ledger surface ----
    @property
    def is_loaded(self) -> bool:
        return self._ledger.is_loaded

    @property
    def sync_status(self) -> SyncStatus:
        return self._ledger.sync_status

    async def load(self, correlation_id: Optional[UUID] = None) -> None:
        """(Re)load the ledger from storage. Selection does not survive a reload."""
        self.select(None)
        await self._ledger.initialize(correlation_id=correlation_id)

    def boxes(self) -> tuple[Box, ...]:
        return self._ledger.get_all()

    async def add_box(
        self,
        name: str,
        balance: Optional[Amount] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Box:
        """Create a box with a fresh id and add it to the ledger.

        Raises whatever ``BoxLedger.add`` raises; on ``LedgerSyncError``
        the box is already in the list.
        """
        box = Box(id=create_box_id(), name=name, balance=balance)
        return await self._ledger.add(box, correlation_id=correlation_id)

    async def edit_box(
        self,
        box: Box,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Edit through the ledger and refresh the selection if it was this box."""
        try:
            return await self._ledger.edit(box, correlation_id=correlation_id)
        finally:
            if self._selected is not None and self._selected.id == box.id:
                current = self._ledger.get(box.id)
                if current is not None and current != self._selected:
                    self.select(current)

    def request_edit(self, box: Optional[Box] = None) -> EditRequest:
        """Hand the view a box (default: the selected one) and the edit operation."""
        target = box if box is not None else self._selected
        if target is None:
            raise NoSelectionError("No box selected")
        return EditRequest(box=target, edit=self.edit_box)

    # ---- Formatting ----
    @staticmethod
    def format_amount(amount: Optional[Amount]) -> str:
        return format_amount(amount)

    def balance_label(self, box: Box) -> str:
        return balance_label(box.balance, self._currency_symbol)
