"""
Reconciliation Client

Keeps the front-end's local copy of both task lists and applies every
user action to it *before* the remote store answers.

Every mutation has the same shape:
1. Capture what is needed to undo the change
2. Apply the change to local state, synchronously
3. Schedule the remote call as an asyncio task and return it at once
4. When the call finishes: on success, merge the authoritative result
   (creates only); on failure, run the rollback and log it

Failures are never raised to the caller. The returned task resolves to a
`SyncResult` that says what happened; the UI is free to ignore it.

CONCURRENCY: Everything runs on one event loop, so local state needs no
lock. There is no ordering between in-flight syncs: when two actions on
the same task race, each continuation patches whatever local state
exists when it runs, and the last one to finish wins.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional
from uuid import UUID

import structlog

from sigeg.audit import AuditLogger, create_correlation_id
from sigeg.models.task import (
    MutationKind,
    SyncResult,
    Task,
    TaskCollection,
    TaskDraft,
    Tenant,
)
from sigeg.services.storage import StorageError, TaskStorageInterface


logger = structlog.get_logger(__name__)

LOAD_ERROR_MESSAGE = (
    "Error al cargar los datos. Verifica que el servidor esté corriendo."
)


class UnknownTaskError(LookupError):
    """The task an action targets is not in the local list."""

    def __init__(self, tenant: Tenant, task_id: int):
        self.tenant = tenant
        self.task_id = task_id
        super().__init__(f"No task {task_id} in {tenant.value}'s list")


class ReconciliationClient:
    """
    Optimistic local state in front of a remote task store.

    Mutating methods must be called from inside a running event loop.
    They return the scheduled sync; awaiting it is optional.
    """

    def __init__(
        self,
        remote: TaskStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], int] = time.time_ns,
    ):
        """
        Args:
            remote: The authoritative store (REST API, data file, or a fake)
            audit_logger: Where sync outcomes are recorded. Local-only
                logging if None.
            clock: Source of temporary ids for optimistic creates. The
                nanosecond timestamp is far above any server-assigned id.
        """
        self._remote = remote
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock

        self._lists: dict[Tenant, list[Task]] = {tenant: [] for tenant in Tenant}
        self._load_error: Optional[str] = None
        self._pending: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Local state
    # -------------------------------------------------------------------------

    def tasks(self, tenant: Tenant) -> list[Task]:
        """Current local list for a tenant (a copy)."""
        return list(self._lists[tenant])

    def snapshot(self) -> TaskCollection:
        return TaskCollection(
            poe=self.tasks(Tenant.POE),
            poisson=self.tasks(Tenant.POISSON),
        )

    def find(self, tenant: Tenant, task_id: int) -> Optional[Task]:
        for task in self._lists[tenant]:
            if task.id == task_id:
                return task
        return None

    @property
    def load_error(self) -> Optional[str]:
        """User-facing message for the last failed load, None after a good one."""
        return self._load_error

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _require(self, tenant: Tenant, task_id: int) -> Task:
        task = self.find(tenant, task_id)
        if task is None:
            raise UnknownTaskError(tenant, task_id)
        return task

    def _map(self, tenant: Tenant, task_id: int, change: Callable[[Task], Task]) -> None:
        self._lists[tenant] = [
            change(task) if task.id == task_id else task
            for task in self._lists[tenant]
        ]

    def _remove(self, tenant: Tenant, task_id: int) -> None:
        self._lists[tenant] = [t for t in self._lists[tenant] if t.id != task_id]

    def _append(self, tenant: Tenant, task: Task) -> None:
        self._lists[tenant] = [*self._lists[tenant], task]

    def _temporary_id(self, tenant: Tenant) -> int:
        taken = {task.id for task in self._lists[tenant]}
        candidate = self._clock()
        while candidate in taken:
            candidate += 1
        return candidate

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> bool:
        """
        Replace local state with the remote store's contents.

        On failure the previous lists are kept and `load_error` is set.
        There is no retry; the user reloads.

        Returns:
            True if the data was loaded
        """
        try:
            collection = await self._remote.load_all()
        except StorageError as e:
            logger.error("load_failed", error=str(e))
            self._load_error = LOAD_ERROR_MESSAGE
            await self._audit_logger.log_data_load_failed(str(e))
            return False

        for tenant in Tenant:
            self._lists[tenant] = list(collection.tasks_for(tenant))
        self._load_error = None

        await self._audit_logger.log_data_loaded(
            {tenant.value: len(self._lists[tenant]) for tenant in Tenant}
        )
        return True

    # -------------------------------------------------------------------------
    # Optimistic mutations
    # -------------------------------------------------------------------------

    def toggle_status(self, tenant: Tenant, task_id: int) -> "asyncio.Task[SyncResult]":
        """
        Flip a task's delivered flag.

        Rollback restores the flag's value from before the flip.
        """
        loop = asyncio.get_running_loop()
        previous = self._require(tenant, task_id).entregada
        new_status = not previous

        self._map(tenant, task_id, lambda t: t.model_copy(update={"entregada": new_status}))

        def rollback() -> None:
            self._map(tenant, task_id, lambda t: t.model_copy(update={"entregada": previous}))

        return self._dispatch(
            loop,
            MutationKind.SET_STATUS,
            tenant,
            task_id,
            call=lambda: self._remote.set_status(tenant, task_id, new_status),
            rollback=rollback,
        )

    def delete_entry(self, tenant: Tenant, task_id: int) -> "asyncio.Task[SyncResult]":
        """
        Remove a task.

        Rollback appends the removed task at the end of the list; its
        original position is not restored.
        """
        loop = asyncio.get_running_loop()
        removed = self._require(tenant, task_id)

        self._remove(tenant, task_id)

        return self._dispatch(
            loop,
            MutationKind.DELETE,
            tenant,
            task_id,
            call=lambda: self._remote.delete_task(tenant, task_id),
            rollback=lambda: self._append(tenant, removed),
        )

    def add_entry(self, tenant: Tenant, draft: TaskDraft) -> "asyncio.Task[SyncResult]":
        """
        Append a new task under a temporary id.

        On success the placeholder is swapped for the server's record
        (with its real id). Rollback drops the placeholder.
        """
        loop = asyncio.get_running_loop()
        temp_id = self._temporary_id(tenant)

        self._append(tenant, Task(**draft.model_dump(), id=temp_id))

        def merge(created: Task) -> None:
            self._map(tenant, temp_id, lambda _: created)

        return self._dispatch(
            loop,
            MutationKind.CREATE,
            tenant,
            temp_id,
            call=lambda: self._remote.create_task(tenant, draft),
            rollback=lambda: self._remove(tenant, temp_id),
            on_success=merge,
        )

    def edit_entry(self, tenant: Tenant, updated: Task) -> "asyncio.Task[SyncResult]":
        """
        Replace a task with an edited version (matched by id).

        The server's response is not merged back. Rollback puts the
        pre-edit record back in place.
        """
        loop = asyncio.get_running_loop()
        original = self._require(tenant, updated.id)

        self._map(tenant, updated.id, lambda _: updated)

        return self._dispatch(
            loop,
            MutationKind.UPDATE,
            tenant,
            updated.id,
            call=lambda: self._remote.update_task(tenant, updated.id, updated.to_draft()),
            rollback=lambda: self._map(tenant, updated.id, lambda _: original),
        )

    # -------------------------------------------------------------------------
    # Background sync
    # -------------------------------------------------------------------------

    def _dispatch(
        self,
        loop: asyncio.AbstractEventLoop,
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        call: Callable[[], Awaitable[Task]],
        rollback: Callable[[], None],
        on_success: Optional[Callable[[Task], None]] = None,
    ) -> "asyncio.Task[SyncResult]":
        correlation_id = create_correlation_id()
        sync = loop.create_task(
            self._sync(
                operation, tenant, task_id, call, rollback, on_success, correlation_id
            )
        )
        self._pending.add(sync)
        sync.add_done_callback(self._pending.discard)
        return sync

    async def _sync(
        self,
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        call: Callable[[], Awaitable[Task]],
        rollback: Callable[[], None],
        on_success: Optional[Callable[[Task], None]],
        correlation_id: UUID,
    ) -> SyncResult:
        try:
            remote_task = await call()
        except Exception as e:
            # Any failure, remote or local, means the change didn't land
            rollback()
            logger.warning(
                "background_sync_failed",
                operation=operation.value,
                tenant=tenant.value,
                task_id=task_id,
                error=str(e),
            )
            await self._audit_logger.log_sync_failed(
                operation=operation,
                tenant=tenant,
                task_id=task_id,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return SyncResult(
                operation=operation,
                tenant=tenant,
                task_id=task_id,
                success=False,
                error_message=str(e),
                rolled_back=True,
            )

        if on_success:
            on_success(remote_task)

        await self._audit_logger.log_sync_confirmed(
            operation=operation,
            tenant=tenant,
            task_id=task_id,
            correlation_id=correlation_id,
        )
        return SyncResult(
            operation=operation,
            tenant=tenant,
            task_id=task_id,
            success=True,
            task=remote_task,
        )

    async def wait_pending(self) -> list[SyncResult]:
        """
        Wait until every sync scheduled on the current loop has finished.

        Syncs scheduled while waiting are waited for too.

        Returns:
            The results, in completion-batch order
        """
        loop = asyncio.get_running_loop()
        results: list[SyncResult] = []
        while True:
            batch = [s for s in self._pending if s.get_loop() is loop]
            if not batch:
                return results
            results.extend(await asyncio.gather(*batch))
            self._pending.difference_update(batch)
