"""
Audit Models for SIGEG

Every mutation, sync outcome and login attempt is logged as an audit
event. This provides:
1. Traceability of what each user changed
2. Diagnostics for background syncs that failed and were rolled back
   (those failures are never shown in the UI)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from sigeg.models.task import MutationKind, Tenant


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Persistence (server side)
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_DELETED = "task_deleted"
    STATUS_UPDATED = "status_updated"

    # Reconciliation (client side)
    SYNC_CONFIRMED = "sync_confirmed"
    SYNC_FAILED = "sync_failed"
    DATA_LOADED = "data_loaded"
    DATA_LOAD_FAILED = "data_load_failed"

    # Access
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Entities are tasks, addressed by (tenant, id) since ids are only
    unique within a tenant.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    tenant: Optional[Tenant] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'task', 'collection', 'user')"
    )
    entity_id: Optional[int] = None

    # Ties an optimistic change to the outcome of its sync
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "tenant": self.tenant.value if self.tenant else None,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.task_persisted(MutationKind.CREATE, Tenant.POE, 4)
        event = AuditEventBuilder.sync_failed(MutationKind.DELETE, Tenant.POE, 3, "boom")
    """

    _PERSISTED_TYPES = {
        MutationKind.CREATE: AuditEventType.TASK_CREATED,
        MutationKind.UPDATE: AuditEventType.TASK_UPDATED,
        MutationKind.DELETE: AuditEventType.TASK_DELETED,
        MutationKind.SET_STATUS: AuditEventType.STATUS_UPDATED,
    }

    @staticmethod
    def task_persisted(
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._PERSISTED_TYPES[operation],
            tenant=tenant,
            entity_type="task",
            entity_id=task_id,
            description=f"Task {task_id} of {tenant.value}: {operation.value} persisted",
            details=details or {},
        )

    @staticmethod
    def sync_confirmed(
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_CONFIRMED,
            severity=AuditSeverity.DEBUG,
            tenant=tenant,
            entity_type="task",
            entity_id=task_id,
            correlation_id=correlation_id,
            description=f"Remote {operation.value} confirmed",
            details={"operation": operation.value},
            is_user_action=True,
        )

    @staticmethod
    def sync_failed(
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.WARNING,
            tenant=tenant,
            entity_type="task",
            entity_id=task_id,
            correlation_id=correlation_id,
            description=f"Remote {operation.value} failed, local change rolled back",
            error_message=error_message,
            details={"operation": operation.value, "rolled_back": True},
            is_user_action=True,
        )

    @staticmethod
    def data_loaded(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            entity_type="collection",
            description=f"Loaded {sum(counts.values())} tasks",
            details={"counts": counts},
        )

    @staticmethod
    def data_load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            description="Failed to load tasks",
            error_message=error_message,
        )

    @staticmethod
    def login_succeeded(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            description=f"User {username} logged in",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(username: str) -> AuditEvent:
        # Never record the attempted password
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description="Login rejected",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def logged_out(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            entity_type="user",
            description=f"User {username} logged out",
            details={"username": username},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
