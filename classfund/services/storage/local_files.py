"""
Local File Storage Implementation

DESIGN DECISION: A directory on the device is used as the key-value medium:
1. Each key is one file named "<key>.json" in the data directory
2. Writes go to a temporary file that atomically replaces the old one
3. No database or server is needed on a member's device

TRADEOFFS:
- One file per key is fine for a handful of keys; this is not a database
- The whole value is rewritten on every save (box collections are small)
- No locking between processes (one app instance per installation)
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from classfund.config import StorageSettings, get_settings
from classfund.models.audit import AuditEvent
from classfund.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    CorruptDataError,
    KeyValueStorageInterface,
    StorageError,
)


class LocalStorageClient:
    """
    Low-level wrapper around the data directory.

    Prepares the directory on first use and retries while the
    medium is not ready (e.g., a mount that appears late).
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage
        self._root: Optional[Path] = None

    def connect(self) -> Path:
        """
        Make sure the data directory exists and is writable.

        Raises:
            ConnectionError: If the directory cannot be prepared
        """
        if self._root is None:
            root = Path(self._settings.data_dir).expanduser()
            try:
                for attempt in Retrying(
                    stop=stop_after_attempt(self._settings.connect_attempts),
                    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                    retry=retry_if_exception_type(OSError),
                    reraise=True,
                ):
                    with attempt:
                        self._prepare(root)
            except OSError as e:
                raise ConnectionError(f"Storage directory unavailable: {root} ({e})") from e
            self._root = root

        return self._root

    @staticmethod
    def _prepare(root: Path) -> None:
        root.mkdir(parents=True, exist_ok=True)
        if not os.access(root, os.W_OK):
            raise PermissionError(f"Not writable: {root}")

    def path_for(self, key: str) -> Path:
        """Get the file that holds a key's value."""
        return self.connect() / f"{key}.json"


class LocalKeyValueStore(KeyValueStorageInterface):
    """
    Key-value store backed by one file per key.

    Writes are all-or-nothing: the new value is written to a temporary
    file next to the target and moved over it with os.replace.
    """

    def __init__(self, client: Optional[LocalStorageClient] = None):
        self._client = client or LocalStorageClient()

    async def get_item(self, key: str) -> Optional[str]:
        """Read the value for a key (None if never written)."""
        path = self._client.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise CorruptDataError(f"Stored value for {key!r} is not UTF-8 text") from e
        except OSError as e:
            raise StorageError(f"Failed to read {key!r}: {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        """Atomically replace the value for a key."""
        path = self._client.path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")

        try:
            with temp_path.open("w", encoding="utf-8", newline="\n") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, path)
        except OSError as e:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
            raise StorageError(f"Failed to write {key!r}: {e}") from e


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit storage: one JSON object per line.
    """

    def __init__(
        self,
        file_name: str = "audit.jsonl",
        client: Optional[LocalStorageClient] = None,
    ):
        self._client = client or LocalStorageClient()
        self._file_name = file_name

    def _path(self) -> Path:
        return self._client.connect() / self._file_name

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            with self._path().open("a", encoding="utf-8", newline="\n") as handle:
                handle.write(event.to_json_line() + "\n")
            return True
        except (OSError, StorageError) as e:
            raise StorageError(f"Failed to write audit event: {e}") from e

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events (newest first)."""
        try:
            lines = self._path().read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to read audit events: {e}") from e

        events = []
        for line in lines:
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValidationError:
                continue  # Skip malformed lines

        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
