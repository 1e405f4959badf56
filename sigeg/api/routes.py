"""
REST endpoints.

Each handler reads the whole document, changes it and writes it back
through the storage layer. Not-found and persistence failures are raised
as storage exceptions and turned into `{"error": ...}` responses by the
app's exception handlers.
"""

from fastapi import APIRouter, Depends, Request

from sigeg.audit import AuditLogger
from sigeg.models.task import MutationKind, StatusUpdate, TaskDraft, Tenant
from sigeg.services.storage import TaskStorageInterface


router = APIRouter()


def get_storage(request: Request) -> TaskStorageInterface:
    return request.app.state.storage


def get_audit_logger(request: Request) -> AuditLogger:
    return request.app.state.audit_logger


@router.get("/data")
async def get_data(storage: TaskStorageInterface = Depends(get_storage)):
    collection = await storage.load_all()
    return collection.to_wire()


@router.post("/tasks/{user}", status_code=201)
async def create_task(
    user: Tenant,
    draft: TaskDraft,
    storage: TaskStorageInterface = Depends(get_storage),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    task = await storage.create_task(user, draft)
    await audit_logger.log_task_persisted(
        MutationKind.CREATE, user, task.id, {"ganancia": task.ganancia}
    )
    return task.to_wire()


@router.put("/tasks/{user}/{task_id}")
async def update_task(
    user: Tenant,
    task_id: int,
    draft: TaskDraft,
    storage: TaskStorageInterface = Depends(get_storage),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    task = await storage.update_task(user, task_id, draft)
    await audit_logger.log_task_persisted(MutationKind.UPDATE, user, task_id)
    return task.to_wire()


@router.delete("/tasks/{user}/{task_id}")
async def delete_task(
    user: Tenant,
    task_id: int,
    storage: TaskStorageInterface = Depends(get_storage),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    task = await storage.delete_task(user, task_id)
    await audit_logger.log_task_persisted(MutationKind.DELETE, user, task_id)
    return task.to_wire()


@router.put("/tasks/{user}/{task_id}/status")
async def update_status(
    user: Tenant,
    task_id: int,
    update: StatusUpdate,
    storage: TaskStorageInterface = Depends(get_storage),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    task = await storage.set_status(user, task_id, update.entregada)
    await audit_logger.log_task_persisted(
        MutationKind.SET_STATUS, user, task_id, {"entregada": update.entregada}
    )
    return task.to_wire()
