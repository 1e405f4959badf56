"""
REST API Storage Client

Implements the storage interface by calling the SIGEG REST API, so the
front-end can use the same reconciliation logic whether it talks to the
server or directly to the data file.

DESIGN DECISION: No retries and, unless configured, no timeouts. A
failed call surfaces immediately as an exception; the reconciliation
client turns that into a rollback.
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

from sigeg.config import get_settings
from sigeg.models.task import StatusUpdate, Task, TaskCollection, TaskDraft, Tenant
from sigeg.services.storage.interface import (
    ConnectionError,
    NotFoundError,
    StorageError,
    TaskStorageInterface,
)


logger = structlog.get_logger(__name__)


class HttpTaskStorage(TaskStorageInterface):
    """
    Task storage over HTTP.

    A fresh `httpx.AsyncClient` is opened per request, so one instance
    can be used from several event loops (Streamlit runs each action on
    its own loop).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings().client
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull the `error` field out of an error body, if there is one."""
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict) and "error" in body:
            return str(body["error"])
        return str(body)

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
    ) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            logger.warning("api_unreachable", method=method, path=path, error=str(e))
            raise ConnectionError(f"Could not reach {self._base_url}: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(self._error_message(response))
        if response.is_error:
            raise StorageError(
                f"{method} {path} failed with {response.status_code}: "
                f"{self._error_message(response)}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"Malformed response from {method} {path}") from e

    @staticmethod
    def _parse_task(body: Any) -> Task:
        try:
            return Task.model_validate(body)
        except ValidationError as e:
            raise StorageError(f"Unexpected task in response: {e}") from e

    async def load_all(self) -> TaskCollection:
        body = await self._request("GET", "/data")
        try:
            return TaskCollection.model_validate(body)
        except ValidationError as e:
            raise StorageError(f"Unexpected data in response: {e}") from e

    async def create_task(self, tenant: Tenant, draft: TaskDraft) -> Task:
        body = await self._request("POST", f"/tasks/{tenant.value}", draft.to_wire())
        return self._parse_task(body)

    async def update_task(self, tenant: Tenant, task_id: int, draft: TaskDraft) -> Task:
        body = await self._request(
            "PUT",
            f"/tasks/{tenant.value}/{task_id}",
            draft.to_wire(),
        )
        return self._parse_task(body)

    async def delete_task(self, tenant: Tenant, task_id: int) -> Task:
        body = await self._request("DELETE", f"/tasks/{tenant.value}/{task_id}")
        return self._parse_task(body)

    async def set_status(self, tenant: Tenant, task_id: int, entregada: bool) -> Task:
        body = await self._request(
            "PUT",
            f"/tasks/{tenant.value}/{task_id}/status",
            StatusUpdate(entregada=entregada).model_dump(),
        )
        return self._parse_task(body)
