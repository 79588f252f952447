"""Box ledger package."""

from classfund.ledger.box_ledger import (
    BoxLedger,
    DuplicateBoxError,
    LedgerError,
    LedgerNotLoadedError,
    LedgerSyncError,
)

__all__ = [
    "BoxLedger",
    "DuplicateBoxError",
    "LedgerError",
    "LedgerNotLoadedError",
    "LedgerSyncError",
]
