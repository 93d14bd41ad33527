"""Map the core error taxonomy onto ``{code, message, details}`` JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from folder_explorer.core.errors import HierarchyError, StorageError

logger = logging.getLogger(__name__)


async def hierarchy_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HierarchyError)
    if exc.status_code >= 500 and not isinstance(exc, StorageError):
        # storage failures are already logged with their traceback by the store
        logger.error("%s: %s", exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    return JSONResponse(
        status_code=400,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Invalid request",
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HierarchyError, hierarchy_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
