"""Services package."""

from sigeg.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    CorruptDataError,
    HttpTaskStorage,
    InMemoryAuditStorage,
    InMemoryTaskStorage,
    JsonFileTaskStorage,
    NotFoundError,
    StorageError,
    TaskStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "CorruptDataError",
    "HttpTaskStorage",
    "InMemoryAuditStorage",
    "InMemoryTaskStorage",
    "JsonFileTaskStorage",
    "NotFoundError",
    "StorageError",
    "TaskStorageInterface",
]
