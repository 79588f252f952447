"""View models for the presentation layer."""

from classfund.viewmodels.amount_format import balance_label, format_amount
from classfund.viewmodels.box_selection import (
    BoxSelectionVM,
    EditRequest,
    NoSelectionError,
    SelectionState,
)

__all__ = [
    "BoxSelectionVM",
    "EditRequest",
    "NoSelectionError",
    "SelectionState",
    "balance_label",
    "format_amount",
]
