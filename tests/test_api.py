"""Tests for the REST API, run against in-memory and file storage."""

import json

import pytest
from fastapi.testclient import TestClient

from sigeg.api import create_app
from sigeg.models.audit import AuditEventType
from sigeg.services.storage import InMemoryTaskStorage, JsonFileTaskStorage


@pytest.fixture()
def api(memory_storage, audit_logger) -> TestClient:
    return TestClient(create_app(memory_storage, audit_logger))


NEW_TASK = {"asignacion": "PEC 3 - Compiladores", "idCode": "C-3", "ganancia": 40, "entregada": False}


class CrashingStorage(InMemoryTaskStorage):
    """Fails with an error outside the storage exception family."""

    async def load_all(self):
        raise RuntimeError("handler bug")


class TestGetData:

    def test_returns_both_lists(self, api, sample_collection):
        response = api.get("/api/data")
        assert response.status_code == 200
        assert response.json() == sample_collection.to_wire()

    def test_empty_store(self):
        api = TestClient(create_app(InMemoryTaskStorage()))
        assert api.get("/api/data").json() == {"poe": [], "poisson": []}

    def test_corrupt_file_is_500(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[[[", encoding="utf-8")
        api = TestClient(create_app(JsonFileTaskStorage(path)))

        response = api.get("/api/data")
        assert response.status_code == 500
        assert "error" in response.json()

    def test_invalid_utf8_file_is_json_500(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_bytes(b'{"poe": [], "poisson": [\xff]}')
        api = TestClient(create_app(JsonFileTaskStorage(path)))

        response = api.get("/api/data")
        assert response.status_code == 500
        assert "error" in response.json()

    def test_unexpected_failure_is_json_500(self, audit_logger, audit_storage):
        api = TestClient(create_app(CrashingStorage(), audit_logger), raise_server_exceptions=False)

        response = api.get("/api/data")
        assert response.status_code == 500
        assert response.json() == {"error": "handler bug"}
        assert audit_storage.events[-1].event_type == AuditEventType.SYSTEM_ERROR


class TestCreate:

    def test_created_with_next_id(self, api):
        response = api.post("/api/tasks/poe", json=NEW_TASK)
        assert response.status_code == 201
        assert response.json() == {**NEW_TASK, "id": 4}

    def test_client_id_is_ignored(self, api):
        response = api.post("/api/tasks/poisson", json={**NEW_TASK, "id": 1_700_000_000})
        assert response.json()["id"] == 2

    def test_appended_to_tenant_list(self, api):
        api.post("/api/tasks/poisson", json=NEW_TASK)
        data = api.get("/api/data").json()
        assert [t["id"] for t in data["poisson"]] == [1, 2]
        assert len(data["poe"]) == 2

    def test_missing_fields_are_422(self, api):
        response = api.post("/api/tasks/poe", json={"ganancia": 10})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"

    def test_unknown_user_is_422(self, api):
        response = api.post("/api/tasks/mallory", json=NEW_TASK)
        assert response.status_code == 422

    def test_write_failure_is_500(self, api, memory_storage):
        memory_storage.fail_writes = True
        response = api.post("/api/tasks/poe", json=NEW_TASK)
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to save task"}

    def test_write_failure_is_audited(self, api, memory_storage, audit_storage):
        memory_storage.fail_writes = True
        api.post("/api/tasks/poe", json=NEW_TASK)
        assert audit_storage.events[-1].event_type == AuditEventType.SYSTEM_ERROR


class TestUpdate:

    def test_replaces_fields_keeps_id(self, api):
        body = {**NEW_TASK, "id": 99}
        response = api.put("/api/tasks/poe/3", json=body)
        assert response.status_code == 200
        assert response.json() == {**NEW_TASK, "id": 3}

    def test_unknown_task_is_404(self, api):
        response = api.put("/api/tasks/poe/42", json=NEW_TASK)
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    def test_write_failure_is_500(self, api, memory_storage):
        memory_storage.fail_writes = True
        response = api.put("/api/tasks/poe/3", json=NEW_TASK)
        assert response.json() == {"error": "Failed to update task"}


class TestDelete:

    def test_returns_deleted_task(self, api, sample_collection):
        response = api.delete("/api/tasks/poe/1")
        assert response.status_code == 200
        assert response.json() == sample_collection.poe[0].to_wire()
        assert [t["id"] for t in api.get("/api/data").json()["poe"]] == [3]

    def test_unknown_task_is_404(self, api):
        response = api.delete("/api/tasks/poisson/3")
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    def test_write_failure_is_500(self, api, memory_storage):
        memory_storage.fail_writes = True
        response = api.delete("/api/tasks/poe/1")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to delete task"}


class TestStatus:

    def test_sets_flag(self, api):
        response = api.put("/api/tasks/poe/3/status", json={"entregada": True})
        assert response.status_code == 200
        assert response.json()["entregada"] is True

    def test_unknown_task_is_404(self, api):
        response = api.put("/api/tasks/poe/2/status", json={"entregada": True})
        assert response.status_code == 404

    def test_missing_flag_is_422(self, api):
        response = api.put("/api/tasks/poe/3/status", json={})
        assert response.status_code == 422

    def test_write_failure_is_500(self, api, memory_storage):
        memory_storage.fail_writes = True
        response = api.put("/api/tasks/poe/3/status", json={"entregada": True})
        assert response.json() == {"error": "Failed to update status"}

    def test_persisted_change_is_audited(self, api, audit_storage):
        api.put("/api/tasks/poisson/1/status", json={"entregada": True})
        event = audit_storage.events[-1]
        assert event.event_type == AuditEventType.STATUS_UPDATED
        assert event.entity_id == 1
        assert event.details == {"entregada": True}


class TestFileBackedApi:

    def test_changes_reach_disk(self, tmp_path):
        path = tmp_path / "initialData.json"
        api = TestClient(create_app(JsonFileTaskStorage(path)))

        api.post("/api/tasks/poe", json=NEW_TASK)
        api.put("/api/tasks/poe/1/status", json={"entregada": True})

        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert on_disk == {"poe": [{**NEW_TASK, "id": 1, "entregada": True}], "poisson": []}
