"""
Audit Logger

DESIGN DECISION: Every mutation and every sync outcome is logged.
Failed background syncs are rolled back silently in the UI, so this log
is the only place they are visible.

The audit logger:
- Is async so it can be awaited from sync continuations and API handlers
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to tie an optimistic change to its sync outcome
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from sigeg.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from sigeg.models.task import MutationKind, Tenant
from sigeg.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route stdlib logging (and therefore structlog) to stderr at `level`.

    Entry points call this once at startup.
    """
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger().setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("sigeg.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_task_persisted(
        self,
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        details: Optional[dict] = None,
    ) -> None:
        """Log a change written to the data file."""
        event = AuditEventBuilder.task_persisted(
            operation=operation,
            tenant=tenant,
            task_id=task_id,
            details=details,
        )
        await self.log(event)

    async def log_sync_confirmed(
        self,
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a background sync the remote store accepted."""
        event = AuditEventBuilder.sync_confirmed(
            operation=operation,
            tenant=tenant,
            task_id=task_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_sync_failed(
        self,
        operation: MutationKind,
        tenant: Tenant,
        task_id: int,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a background sync that failed and was rolled back."""
        event = AuditEventBuilder.sync_failed(
            operation=operation,
            tenant=tenant,
            task_id=task_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_data_loaded(self, counts: dict[str, int]) -> None:
        await self.log(AuditEventBuilder.data_loaded(counts))

    async def log_data_load_failed(self, error_message: str) -> None:
        await self.log(AuditEventBuilder.data_load_failed(error_message))

    async def log_login(self, username: str, succeeded: bool) -> None:
        """Log a login attempt. The password is never logged."""
        if succeeded:
            event = AuditEventBuilder.login_succeeded(username)
        else:
            event = AuditEventBuilder.login_failed(username)
        await self.log(event)

    async def log_logout(self, username: str) -> None:
        await self.log(AuditEventBuilder.logged_out(username))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One per user action; the optimistic change and its sync outcome
    share it.
    """
    return uuid4()
