"""
Storage Services Package

Provides the abstract storage interface and its implementations:
the JSON data file (server side), an in-memory store (tests), and an
HTTP client for the REST API (front-end side).
"""

from sigeg.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    CorruptDataError,
    NotFoundError,
    StorageError,
    TaskStorageInterface,
    find_task_index,
    next_task_id,
)
from sigeg.services.storage.document import DocumentTaskStorage
from sigeg.services.storage.json_file import JsonFileTaskStorage
from sigeg.services.storage.memory import InMemoryAuditStorage, InMemoryTaskStorage
from sigeg.services.storage.http_client import HttpTaskStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "DocumentTaskStorage",
    "TaskStorageInterface",
    # Helpers
    "find_task_index",
    "next_task_id",
    # Exceptions
    "ConnectionError",
    "CorruptDataError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "HttpTaskStorage",
    "InMemoryAuditStorage",
    "InMemoryTaskStorage",
    "JsonFileTaskStorage",
]
