"""Translation of domain failures into HTTP status codes and error bodies."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..domain.errors import (
    ConflictError,
    DomainError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[DomainError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}

_REQUEST_SECTIONS = {"body", "query", "path", "header"}


def error_body(status_code: int, request: Request, **detail: Any) -> dict[str, Any]:
    """Build the ``{status, timestamp, error|errores, path}`` payload."""
    return {
        "status": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **detail,
        "path": request.url.path,
    }


def status_for(exc: DomainError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[error_type]
    return status.HTTP_400_BAD_REQUEST


async def _handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, ValidationError):
        logger.warning("validation failed on %s: %s", request.url.path, exc.errors)
        content = error_body(status_code, request, errores=exc.errors)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        content = error_body(status_code, request, error=exc.message)
    return JSONResponse(status_code=status_code, content=content)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = {}
    for item in exc.errors():
        parts = [str(part) for part in item.get("loc", ()) if part not in _REQUEST_SECTIONS]
        errors.setdefault(".".join(parts) or "body", item.get("msg", "invalid value"))
    logger.warning("request validation failed on %s: %s", request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, request, errores=errors),
    )


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, request, error=exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            request,
            error="internal server error",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every error translator to ``app``."""
    app.add_exception_handler(DomainError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
