"""
Core Data Models for SIGEG

These models define the schemas for all task data flowing through the
system: the JSON data file, the REST API bodies and the client's local
state all use them.

DESIGN DECISION: Field names on the wire are kept exactly as the data
file stores them (`asignacion`, `idCode`, `ganancia`, `entregada`), so
existing files load unchanged. Python code uses `id_code`; the alias
handles the translation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Tenant(str, Enum):
    """
    The two task owners.

    Each tenant has an independent task list; ids are only unique
    within one tenant's list.
    """
    POE = "poe"
    POISSON = "poisson"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class MutationKind(str, Enum):
    """Kind of change a background sync carries to the remote store."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SET_STATUS = "set_status"


# =============================================================================
# TASK MODELS
# =============================================================================

class TaskDraft(BaseModel):
    """
    A task as submitted from the form: everything except the id.

    This is the body of create and update requests. The server assigns
    or keeps the id, so any `id` in an incoming body is ignored.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    asignacion: str = Field(
        ...,
        min_length=1,
        description="Assignment name"
    )
    id_code: str = Field(
        default="",
        alias="idCode",
        description="Free-form assignment identifier"
    )
    ganancia: int = Field(
        ...,
        ge=0,
        description="Expected earnings in euros"
    )
    entregada: bool = Field(
        default=False,
        description="Whether the assignment has been delivered and settled"
    )

    def to_wire(self) -> dict:
        """Serialize with the data file's field names."""
        return self.model_dump(by_alias=True)


class Task(TaskDraft):
    """A stored task. `id` is unique within its tenant's list."""

    id: int = Field(
        ...,
        description="Server-assigned id (or a temporary client id before sync)"
    )

    def to_draft(self) -> TaskDraft:
        return TaskDraft(**self.model_dump(exclude={"id"}))


class StatusUpdate(BaseModel):
    """Body of the set-status request."""

    entregada: bool


class TaskCollection(BaseModel):
    """
    The whole persisted document: one ordered task list per tenant.

    A tenant key missing from the file loads as an empty list.
    """
    model_config = ConfigDict(extra="ignore")

    poe: list[Task] = Field(default_factory=list)
    poisson: list[Task] = Field(default_factory=list)

    def tasks_for(self, tenant: Tenant) -> list[Task]:
        return getattr(self, tenant.value)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# =============================================================================
# RESULT MODELS
# =============================================================================

class SyncResult(BaseModel):
    """
    Outcome of one background sync issued by the reconciliation client.

    On failure the local state has already been rolled back by the time
    this result is available.
    """

    operation: MutationKind
    tenant: Tenant
    task_id: int = Field(
        ...,
        description="Local id the mutation targeted (temporary id for creates)"
    )
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    success: bool
    error_message: Optional[str] = None
    rolled_back: bool = False

    task: Optional[Task] = Field(
        default=None,
        description="Authoritative record returned by the remote store"
    )


class TenantSummary(BaseModel):
    """Totals shown on a tenant's summary card."""

    tenant: Tenant
    count: int = Field(ge=0)
    total: int = Field(ge=0)
    delivered: int = Field(ge=0)
    pending: int = Field(ge=0)


class Comparison(BaseModel):
    """Head-to-head numbers between the two tenants."""

    difference: int = Field(
        ...,
        description="poe total minus poisson total"
    )
    delivered_difference: int = Field(
        ...,
        description="poe delivered minus poisson delivered"
    )
    leader: Tenant
