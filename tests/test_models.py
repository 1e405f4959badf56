"""
Tests for SIGEG

Test strategy:
1. Unit tests for individual components (models, aggregates, auth)
2. Integration tests for flows (API, HTTP client, reconciliation) with
   in-memory storage
3. No real network calls in tests
"""

import pytest
from pydantic import ValidationError

from sigeg.models.task import (
    MutationKind,
    SyncResult,
    Task,
    TaskCollection,
    TaskDraft,
    Tenant,
)
from sigeg.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestTaskModels:
    """Tests for task-related Pydantic models."""

    def test_draft_creation(self):
        """Test TaskDraft model creation."""
        draft = TaskDraft(asignacion="Práctica 1", idCode="P1", ganancia=80)
        assert draft.asignacion == "Práctica 1"
        assert draft.id_code == "P1"
        assert draft.entregada is False

    def test_draft_defaults_id_code(self):
        """idCode is optional."""
        draft = TaskDraft(asignacion="X", ganancia=10)
        assert draft.id_code == ""

    def test_draft_rejects_blank_name(self):
        """Whitespace-only names are rejected after stripping."""
        with pytest.raises(ValidationError):
            TaskDraft(asignacion="   ", ganancia=10)

    def test_draft_rejects_negative_ganancia(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            TaskDraft(asignacion="X", ganancia=-5)

    def test_draft_ignores_incoming_id(self):
        """An id in a create body is dropped."""
        draft = TaskDraft.model_validate({"asignacion": "X", "ganancia": 1, "id": 99})
        assert "id" not in draft.model_dump()

    def test_wire_format_uses_file_field_names(self):
        """Serialization matches the data file layout."""
        task = Task(id=4, asignacion="X", id_code="C", ganancia=10, entregada=True)
        assert task.to_wire() == {
            "asignacion": "X",
            "idCode": "C",
            "ganancia": 10,
            "entregada": True,
            "id": 4,
        }

    def test_task_to_draft(self):
        task = Task(id=4, asignacion="X", ganancia=10)
        draft = task.to_draft()
        assert isinstance(draft, TaskDraft)
        assert not isinstance(draft, Task)
        assert draft.asignacion == "X"


class TestTaskCollection:
    """Tests for the persisted document model."""

    def test_missing_tenant_loads_empty(self):
        collection = TaskCollection.model_validate({"poe": []})
        assert collection.poisson == []

    def test_tasks_for(self, sample_collection):
        assert [t.id for t in sample_collection.tasks_for(Tenant.POE)] == [1, 3]
        assert len(sample_collection.tasks_for(Tenant.POISSON)) == 1

    def test_parses_original_json(self):
        raw = '{"poe": [{"id": 1, "asignacion": "A", "idCode": "", "ganancia": 80, "entregada": false}], "poisson": []}'
        collection = TaskCollection.model_validate_json(raw)
        assert collection.poe[0].ganancia == 80


class TestSyncResult:

    def test_failure_result(self):
        result = SyncResult(
            operation=MutationKind.DELETE,
            tenant=Tenant.POE,
            task_id=3,
            success=False,
            error_message="boom",
            rolled_back=True,
        )
        assert result.task is None
        assert result.completed_at.tzinfo is not None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TASK_CREATED,
            description="Task created",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.task_persisted(
            MutationKind.SET_STATUS, Tenant.POISSON, 7, {"entregada": True}
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "status_updated"
        assert log_dict["tenant"] == "poisson"
        assert log_dict["entity_id"] == 7
        assert log_dict["details"]["entregada"] is True

    def test_sync_failed_is_warning(self):
        event = AuditEventBuilder.sync_failed(
            MutationKind.CREATE, Tenant.POE, 123, "timeout"
        )
        assert event.event_type == AuditEventType.SYNC_FAILED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "timeout"
        assert event.details["rolled_back"] is True

    def test_login_failed_never_records_password(self):
        event = AuditEventBuilder.login_failed("poe")
        assert "password" not in event.details
        assert event.is_user_action is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
