"""Services package."""

from classfund.services.storage import (
    AuditStorageInterface,
    BoxStorageInterface,
    ConnectionError,
    CorruptDataError,
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
    JsonLinesAuditStorage,
    KeyValueBoxStorage,
    KeyValueStorageInterface,
    LocalKeyValueStore,
    LocalStorageClient,
    StorageError,
    StoreError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "BoxStorageInterface",
    "ConnectionError",
    "CorruptDataError",
    "InMemoryAuditStorage",
    "InMemoryKeyValueStore",
    "JsonLinesAuditStorage",
    "KeyValueBoxStorage",
    "KeyValueStorageInterface",
    "LocalKeyValueStore",
    "LocalStorageClient",
    "StorageError",
    "StoreError",
]
