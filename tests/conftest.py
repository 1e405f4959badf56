"""Shared fixtures."""

import pytest

from sigeg.audit import AuditLogger
from sigeg.config import get_settings
from sigeg.models.task import Task, TaskCollection
from sigeg.services.storage import InMemoryAuditStorage, InMemoryTaskStorage


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Keep tests away from the developer's .env and data file.

    Settings are cached, so the cache is cleared around every test.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SIGEG_STORAGE_DATA_FILE", str(tmp_path / "data.json"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def sample_collection() -> TaskCollection:
    return TaskCollection(
        poe=[
            Task(id=1, asignacion="Práctica 1 - Sistemas operativos", idCode="(31352 . 48320)", ganancia=80, entregada=True),
            Task(id=3, asignacion="PEC 2 - Redes", idCode="R-22", ganancia=50, entregada=False),
        ],
        poisson=[
            Task(id=1, asignacion="TFG capítulo 3", ganancia=120, entregada=False),
        ],
    )


@pytest.fixture()
def memory_storage(sample_collection: TaskCollection) -> InMemoryTaskStorage:
    return InMemoryTaskStorage(sample_collection)


@pytest.fixture()
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture()
def audit_logger(audit_storage: InMemoryAuditStorage) -> AuditLogger:
    return AuditLogger(audit_storage)
