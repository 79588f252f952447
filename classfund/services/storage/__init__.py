"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local file store as the backend, but designed to be swappable.
"""

from classfund.services.storage.interface import (
    AuditStorageInterface,
    BoxStorageInterface,
    ConnectionError,
    CorruptDataError,
    KeyValueStorageInterface,
    StorageError,
    StoreError,
)
from classfund.services.storage.box_storage import (
    DEFAULT_BOXES_KEY,
    KeyValueBoxStorage,
)
from classfund.services.storage.local_files import (
    JsonLinesAuditStorage,
    LocalKeyValueStore,
    LocalStorageClient,
)
from classfund.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BoxStorageInterface",
    "KeyValueStorageInterface",
    # Exceptions
    "ConnectionError",
    "CorruptDataError",
    "StorageError",
    "StoreError",
    # Box store adapter
    "DEFAULT_BOXES_KEY",
    "KeyValueBoxStorage",
    # Local file implementation
    "JsonLinesAuditStorage",
    "LocalKeyValueStore",
    "LocalStorageClient",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryKeyValueStore",
]
