"""
Tests for the REST API storage client.

The client talks to a real app through httpx.ASGITransport; transport
failures are simulated with httpx.MockTransport.
"""

import httpx
import pytest

from sigeg.api import create_app
from sigeg.models.task import TaskDraft, Tenant
from sigeg.reconciliation import LOAD_ERROR_MESSAGE, ReconciliationClient
from sigeg.services.storage import (
    ConnectionError,
    NotFoundError,
    StorageError,
)
from sigeg.services.storage.http_client import HttpTaskStorage


BASE_URL = "http://testserver/api"


@pytest.fixture()
def http_storage(memory_storage) -> HttpTaskStorage:
    transport = httpx.ASGITransport(app=create_app(memory_storage))
    return HttpTaskStorage(BASE_URL, transport=transport)


def mock_storage(handler) -> HttpTaskStorage:
    return HttpTaskStorage(BASE_URL, transport=httpx.MockTransport(handler))


class TestAgainstApi:

    @pytest.mark.asyncio
    async def test_load_all(self, http_storage, sample_collection):
        assert await http_storage.load_all() == sample_collection

    @pytest.mark.asyncio
    async def test_create(self, http_storage, memory_storage):
        task = await http_storage.create_task(Tenant.POE, TaskDraft(asignacion="X", idCode="Y", ganancia=7))
        assert task.id == 4
        assert task.id_code == "Y"
        assert (await memory_storage.get_task(Tenant.POE, 4)).asignacion == "X"

    @pytest.mark.asyncio
    async def test_update(self, http_storage):
        task = await http_storage.update_task(Tenant.POE, 1, TaskDraft(asignacion="Renamed", ganancia=1))
        assert task.id == 1
        assert task.asignacion == "Renamed"

    @pytest.mark.asyncio
    async def test_delete(self, http_storage, memory_storage):
        deleted = await http_storage.delete_task(Tenant.POISSON, 1)
        assert deleted.ganancia == 120
        assert (await memory_storage.list_tasks(Tenant.POISSON)) == []

    @pytest.mark.asyncio
    async def test_set_status(self, http_storage):
        task = await http_storage.set_status(Tenant.POE, 1, False)
        assert task.entregada is False

    @pytest.mark.asyncio
    async def test_not_found_carries_server_message(self, http_storage):
        with pytest.raises(NotFoundError, match="Task not found"):
            await http_storage.delete_task(Tenant.POE, 42)

    @pytest.mark.asyncio
    async def test_server_failure_is_storage_error(self, http_storage, memory_storage):
        memory_storage.fail_writes = True
        with pytest.raises(StorageError, match="Failed to update status") as exc_info:
            await http_storage.set_status(Tenant.POE, 1, False)
        assert not isinstance(exc_info.value, NotFoundError)


class TestTransportFailures:

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ConnectionError):
            await mock_storage(refuse).load_all()

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        storage = mock_storage(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(StorageError, match="Malformed response"):
            await storage.load_all()

    @pytest.mark.asyncio
    async def test_unexpected_task_shape(self):
        storage = mock_storage(lambda request: httpx.Response(200, json={"ok": True}))
        with pytest.raises(StorageError, match="Unexpected task"):
            await storage.set_status(Tenant.POE, 1, True)

    @pytest.mark.asyncio
    async def test_request_paths_and_bodies(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path, request.content))
            return httpx.Response(200, json={"id": 5, "asignacion": "X", "ganancia": 1, "entregada": True})

        storage = mock_storage(handler)
        await storage.set_status(Tenant.POISSON, 5, True)
        await storage.delete_task(Tenant.POE, 5)

        assert seen[0][:2] == ("PUT", "/api/tasks/poisson/5/status")
        assert b'"entregada"' in seen[0][2]
        assert seen[1][:2] == ("DELETE", "/api/tasks/poe/5")

    def test_trailing_slash_is_stripped(self):
        assert HttpTaskStorage("http://example.com/api/").base_url == "http://example.com/api"

    def test_base_url_defaults_to_settings(self, monkeypatch):
        from sigeg.config import get_settings

        monkeypatch.setenv("SIGEG_CLIENT_API_BASE_URL", "http://backend:9000/api")
        get_settings.cache_clear()
        assert HttpTaskStorage().base_url == "http://backend:9000/api"


class TestClientOverHttp:

    @pytest.mark.asyncio
    async def test_down_server_shows_load_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = ReconciliationClient(mock_storage(refuse))
        assert await client.load() is False
        assert client.load_error == LOAD_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_round_trip_through_api(self, http_storage, memory_storage):
        client = ReconciliationClient(http_storage)
        await client.load()

        client.add_entry(Tenant.POISSON, TaskDraft(asignacion="Nueva", ganancia=15))
        client.toggle_status(Tenant.POE, 3)
        results = await client.wait_pending()

        assert all(r.success for r in results)
        assert client.snapshot() == memory_storage.load()
