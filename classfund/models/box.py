"""
Core Data Models for the Class Fund Ledger

A Box is a named sub-fund ("caixinha") of the class fund with a running
balance. It is the only entity that gets persisted.

DESIGN DECISION: Boxes are frozen Pydantic models.
Editing a box means building a new Box with the same id, so a snapshot
handed to the UI can never change underneath the ledger.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
)


# =============================================================================
# BOX MODEL
# =============================================================================

class Box(BaseModel):
    """
    A named sub-fund with a monetary balance.

    CRITICAL: `balance` may be None. A missing balance is shown as zero
    but is stored exactly as it was given.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Stable unique identifier, assigned at creation"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Display label for the box"
    )
    balance: Optional[Decimal] = Field(
        default=None,
        description="Current balance, or None when never set"
    )

    @field_validator('id', mode='before')
    @classmethod
    def coerce_numeric_id(cls, v):
        """Older blobs stored ids as numbers."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('balance', mode='before')
    @classmethod
    def float_balance_as_decimal(cls, v):
        """Read float balances through their shortest repr (12.5, not 12.4999...)."""
        if isinstance(v, float):
            return Decimal(repr(v))
        return v

    @field_validator('balance')
    @classmethod
    def reject_non_finite(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and not v.is_finite():
            raise ValueError("Balance must be a finite number")
        return v

    @field_serializer('balance', when_used='json')
    def balance_as_text(self, v: Optional[Decimal]) -> Optional[str]:
        return None if v is None else str(v)

    def with_changes(
        self,
        name: Optional[str] = None,
        balance: Optional[Decimal] = None,
    ) -> "Box":
        """Return a copy with a new name and/or balance; the id never changes."""
        return Box(
            id=self.id,
            name=self.name if name is None else name,
            balance=self.balance if balance is None else balance,
        )


def create_box_id() -> str:
    """
    Create a new unique box id.

    The ledger never generates ids itself; callers use this
    before building a Box for `add`.
    """
    return uuid4().hex


# =============================================================================
# SYNC STATUS (view-model value, never persisted)
# =============================================================================

class SyncStatus(BaseModel):
    """
    Whether the in-memory collection matches what was last persisted.

    `pending_sync` is True after a failed save and stays True until
    the next successful one.
    """
    model_config = ConfigDict(frozen=True)

    pending_sync: bool = False
    last_error: Optional[str] = None
    last_synced_at: Optional[datetime] = None


# =============================================================================
# SERIALIZATION
# =============================================================================

_BOX_LIST = TypeAdapter(list[Box])


class BoxDecodeError(ValueError):
    """The stored text is not a valid list of boxes."""
    pass


def serialize_boxes(boxes) -> str:
    """
    Encode an ordered sequence of boxes as a JSON array.

    Each record carries exactly the fields id, name and balance.
    Balances are written as decimal strings so no precision is lost.
    """
    return json.dumps(
        [box.model_dump(mode="json") for box in boxes],
        ensure_ascii=False,
        separators=(",", ":"),
    )


def deserialize_boxes(text: str) -> list[Box]:
    """
    Decode a JSON array of box records.

    Raises:
        BoxDecodeError: If the text is not JSON or a record is invalid
    """
    try:
        return _BOX_LIST.validate_json(text)
    except ValidationError as e:
        raise BoxDecodeError(f"Invalid box data: {e.error_count()} error(s)") from e
