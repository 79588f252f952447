"""
Box Store Adapter

Persists the whole box collection as one JSON blob under a fixed key
of any key-value medium.

Format: a JSON array of {"id", "name", "balance"} objects, in display
order. Balances are decimal strings or null.
"""

from typing import Optional, Sequence

from classfund.models.box import Box, BoxDecodeError, deserialize_boxes, serialize_boxes
from classfund.services.storage.interface import (
    BoxStorageInterface,
    CorruptDataError,
    KeyValueStorageInterface,
)


DEFAULT_BOXES_KEY = "boxes"


class KeyValueBoxStorage(BoxStorageInterface):
    """
    Box storage on top of a key-value store.

    The store handle is injected; this class owns no medium of its own.
    """

    def __init__(
        self,
        store: KeyValueStorageInterface,
        key: Optional[str] = None,
    ):
        self._store = store
        self._key = key or DEFAULT_BOXES_KEY

    @property
    def key(self) -> str:
        return self._key

    async def load_boxes(self) -> list[Box]:
        """Load boxes; an absent key is an empty collection, not an error."""
        raw = await self._store.get_item(self._key)
        if raw is None:
            return []
        try:
            return deserialize_boxes(raw)
        except BoxDecodeError as e:
            raise CorruptDataError(f"Stored boxes under {self._key!r} are unreadable: {e}") from e

    async def save_boxes(self, boxes: Sequence[Box]) -> None:
        """Serialize everything first, then write once."""
        payload = serialize_boxes(boxes)
        await self._store.set_item(self._key, payload)
