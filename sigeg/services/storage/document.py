"""
Whole-Document Storage

The persisted state is one document holding both tenants' lists. Every
operation loads the full document, changes it in Python, and writes the
full document back. There is no partial update and no locking: two
concurrent writers can silently lose one writer's change (last writer
wins).

Subclasses only decide where the document lives (`load`/`save`).
"""

from abc import abstractmethod

import structlog

from sigeg.models.task import Task, TaskCollection, TaskDraft, Tenant
from sigeg.services.storage.interface import (
    NotFoundError,
    StorageError,
    TaskStorageInterface,
    find_task_index,
    next_task_id,
)


logger = structlog.get_logger(__name__)


class DocumentTaskStorage(TaskStorageInterface):
    """Task storage over a single load/save document."""

    @abstractmethod
    def load(self) -> TaskCollection:
        """
        Read the whole document.

        Raises:
            StorageError: If the document exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, collection: TaskCollection) -> bool:
        """
        Overwrite the whole document.

        Returns:
            True if written, False if the write failed
        """
        pass

    def _persist(self, collection: TaskCollection, failure_message: str) -> None:
        if not self.save(collection):
            raise StorageError(failure_message)

    def _locate(self, collection: TaskCollection, tenant: Tenant, task_id: int) -> tuple[list[Task], int]:
        tasks = collection.tasks_for(tenant)
        idx = find_task_index(tasks, task_id)
        if idx is None:
            raise NotFoundError("Task not found")
        return tasks, idx

    async def load_all(self) -> TaskCollection:
        return self.load()

    async def create_task(self, tenant: Tenant, draft: TaskDraft) -> Task:
        collection = self.load()
        tasks = collection.tasks_for(tenant)

        task = Task(**draft.model_dump(), id=next_task_id(tasks))
        tasks.append(task)

        self._persist(collection, "Failed to save task")
        logger.info("task_created", tenant=tenant.value, task_id=task.id)
        return task

    async def update_task(self, tenant: Tenant, task_id: int, draft: TaskDraft) -> Task:
        collection = self.load()
        tasks, idx = self._locate(collection, tenant, task_id)

        # The id always comes from the path, never from the body
        tasks[idx] = Task(**draft.model_dump(), id=task_id)

        self._persist(collection, "Failed to update task")
        logger.info("task_updated", tenant=tenant.value, task_id=task_id)
        return tasks[idx]

    async def delete_task(self, tenant: Tenant, task_id: int) -> Task:
        collection = self.load()
        tasks, idx = self._locate(collection, tenant, task_id)

        deleted = tasks.pop(idx)

        self._persist(collection, "Failed to delete task")
        logger.info("task_deleted", tenant=tenant.value, task_id=task_id)
        return deleted

    async def set_status(self, tenant: Tenant, task_id: int, entregada: bool) -> Task:
        collection = self.load()
        tasks, idx = self._locate(collection, tenant, task_id)

        tasks[idx] = tasks[idx].model_copy(update={"entregada": entregada})

        self._persist(collection, "Failed to update status")
        logger.info(
            "status_updated",
            tenant=tenant.value,
            task_id=task_id,
            entregada=entregada,
        )
        return tasks[idx]
