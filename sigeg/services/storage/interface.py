"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for task storage.
This allows us to:
1. Back the REST API with the JSON data file
2. Use in-memory storage for testing
3. Point the front-end either at the REST API or straight at the file
4. Keep the reconciliation logic decoupled from where data lives

Every mutating operation returns the affected task, the same shape the
REST API answers with.
"""

from abc import ABC, abstractmethod
from typing import Optional

from sigeg.models.audit import AuditEvent
from sigeg.models.task import Task, TaskCollection, TaskDraft, Tenant


def next_task_id(tasks: list[Task]) -> int:
    """
    Id for a new task in a tenant's list.

    `max(existing ids) + 1`, or 1 for an empty list. This is not a
    persistent counter: deleting the highest id makes it available again.
    """
    if not tasks:
        return 1
    return max(task.id for task in tasks) + 1


def find_task_index(tasks: list[Task], task_id: int) -> Optional[int]:
    """Position of the task with `task_id`, or None."""
    for idx, task in enumerate(tasks):
        if task.id == task_id:
            return idx
    return None


class TaskStorageInterface(ABC):
    """
    Abstract interface for task storage operations.

    Any storage implementation (JSON file, in-memory, remote HTTP)
    must implement these methods.
    """

    @abstractmethod
    async def load_all(self) -> TaskCollection:
        """
        Fetch both tenants' task lists.

        Raises:
            StorageError: If the store is unreachable or its data malformed
        """
        pass

    @abstractmethod
    async def create_task(self, tenant: Tenant, draft: TaskDraft) -> Task:
        """
        Append a new task to a tenant's list.

        Args:
            tenant: Owner of the new task
            draft: Task fields; the store assigns the id

        Returns:
            The created task, carrying its assigned id

        Raises:
            StorageError: If the task could not be persisted
        """
        pass

    @abstractmethod
    async def update_task(self, tenant: Tenant, task_id: int, draft: TaskDraft) -> Task:
        """
        Replace every field of an existing task, keeping its id.

        Raises:
            NotFoundError: If the tenant has no task with this id
            StorageError: If the change could not be persisted
        """
        pass

    @abstractmethod
    async def delete_task(self, tenant: Tenant, task_id: int) -> Task:
        """
        Remove a task.

        Returns:
            The deleted task

        Raises:
            NotFoundError: If the tenant has no task with this id
            StorageError: If the change could not be persisted
        """
        pass

    @abstractmethod
    async def set_status(self, tenant: Tenant, task_id: int, entregada: bool) -> Task:
        """
        Set a task's delivered flag.

        Raises:
            NotFoundError: If the tenant has no task with this id
            StorageError: If the change could not be persisted
        """
        pass

    async def list_tasks(self, tenant: Tenant) -> list[Task]:
        """List one tenant's tasks in stored order."""
        collection = await self.load_all()
        return collection.tasks_for(tenant)

    async def get_task(self, tenant: Tenant, task_id: int) -> Optional[Task]:
        """
        Retrieve a task by id.

        Returns:
            The task if found, None otherwise
        """
        tasks = await self.list_tasks(tenant)
        idx = find_task_index(tasks, task_id)
        return tasks[idx] if idx is not None else None


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Task not found in the tenant's list."""
    pass


class CorruptDataError(StorageError):
    """The persisted document could not be read or parsed."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
