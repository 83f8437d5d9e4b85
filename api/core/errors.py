"""
Error taxonomy shared by every feature package.

Services and repositories raise these; `install_error_handlers` turns them
into JSON responses of the form `{"detail": "..."}`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


class StorageError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
    detail = exc.detail
    if isinstance(exc, StorageError):
        logger.error(
            "storage_error method=%s path=%s error=%s",
            request.method,
            request.url.path,
            exc.detail,
            exc_info=exc,
        )
        # Driver messages stay in the log, not in the response.
        detail = "Internal storage error."
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


async def _handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Malformed request body."},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _handle_api_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
