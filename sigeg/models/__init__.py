"""
Data Models Package

This package contains all Pydantic models used in SIGEG.
All data flowing through the system must conform to these schemas.
"""

from sigeg.models.task import (
    Comparison,
    MutationKind,
    StatusUpdate,
    SyncResult,
    Task,
    TaskCollection,
    TaskDraft,
    Tenant,
    TenantSummary,
)
from sigeg.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Task models
    "Comparison",
    "MutationKind",
    "StatusUpdate",
    "SyncResult",
    "Task",
    "TaskCollection",
    "TaskDraft",
    "Tenant",
    "TenantSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
