"""
FastAPI Backend for SIGEG

Serves the task CRUD API under /api, backed by the JSON data file.

API:
    GET    /api/data                      → { poe: [...], poisson: [...] }
    POST   /api/tasks/{user}              → 201 created task
    PUT    /api/tasks/{user}/{id}         → updated task
    DELETE /api/tasks/{user}/{id}         → deleted task
    PUT    /api/tasks/{user}/{id}/status  → body { entregada }, updated task

Errors are always `{"error": message}`: 404 for unknown tasks, 422 for
invalid bodies or users, 500 when the data file can't be read or written
or anything else goes wrong.
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sigeg import __version__
from sigeg.api.routes import router
from sigeg.audit import AuditLogger
from sigeg.config import get_settings
from sigeg.services.storage import (
    JsonFileTaskStorage,
    NotFoundError,
    StorageError,
    TaskStorageInterface,
)


logger = structlog.get_logger(__name__)


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def _storage_failed(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "request_failed",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    await request.app.state.audit_logger.log_error(
        error_type=type(exc).__name__,
        error_message=str(exc),
        details={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request_crashed",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    await request.app.state.audit_logger.log_error(
        error_type=type(exc).__name__,
        error_message=str(exc),
        details={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


def create_app(
    storage: Optional[TaskStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        storage: Task store to serve. Defaults to the configured JSON file.
        audit_logger: Audit sink. Defaults to local-only logging.
    """
    app = FastAPI(title="SIGEG API", version=__version__)

    app.state.storage = storage or JsonFileTaskStorage()
    app.state.audit_logger = audit_logger or AuditLogger()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().api.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # NotFoundError subclasses StorageError; the more specific handler wins
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(StorageError, _storage_failed)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    # Anything else still answers with an {"error": ...} body
    app.add_exception_handler(Exception, _unexpected_error)

    app.include_router(router, prefix="/api")
    return app
