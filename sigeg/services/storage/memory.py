"""
In-Memory Storage

Same semantics as the JSON file store, without touching disk. Used by
the test suite and handy for running the API against throwaway data.
"""

from typing import Optional

from sigeg.models.audit import AuditEvent
from sigeg.models.task import TaskCollection
from sigeg.services.storage.document import DocumentTaskStorage
from sigeg.services.storage.interface import AuditStorageInterface


class InMemoryTaskStorage(DocumentTaskStorage):
    """
    Task storage holding the document in memory.

    Loads and saves hand out deep copies, so callers can never mutate
    the stored document without going through `save`, just like a file.
    Set `fail_writes` to make every save report failure.
    """

    def __init__(self, collection: Optional[TaskCollection] = None):
        self._collection = (collection or TaskCollection()).model_copy(deep=True)
        self.fail_writes = False
        self.save_count = 0

    def load(self) -> TaskCollection:
        return self._collection.model_copy(deep=True)

    def save(self, collection: TaskCollection) -> bool:
        if self.fail_writes:
            return False
        self._collection = collection.model_copy(deep=True)
        self.save_count += 1
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True
