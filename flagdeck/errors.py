"""
Error taxonomy and the JSON error envelope.

Every error raised inside a request ends up as ``{"error": ..., "details": ...}``
with the status code of its class. Anything that is not an ``ApiError`` is
logged server-side and answered with a generic 500.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .logging_config import log_event

MISSING_AUTH_HEADER = "Missing Authorization header"
INVALID_KEY_FORMAT = "Invalid API key format"
INVALID_KEY = "Invalid API key"


class ApiError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request data"


class AuthFormatError(ApiError):
    """Authorization header missing or not shaped like a key"""
    status_code = 401
    message = INVALID_KEY_FORMAT


class AuthCredentialError(ApiError):
    """Well-formed key that does not verify, or the wrong key class.

    The message never says which of the two happened.
    """
    status_code = 401
    message = INVALID_KEY


class NotFoundError(ApiError):
    status_code = 404
    message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    message = "Conflict"


class InternalError(ApiError):
    status_code = 500
    message = "Internal server error"


def _context_fields(request: Request) -> dict:
    fields = {
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
    }
    ctx = getattr(request.state, "auth_context", None)
    if ctx is not None:
        fields.update(tenant_id=ctx.tenant_id, project_id=ctx.project_id, api_key_id=ctx.api_key_id)
    tenant_id = getattr(request.state, "tenant_id", None)
    if tenant_id is not None:
        fields.setdefault("tenant_id", tenant_id)
    return fields


def internal_error(exc: Exception, event: str, request: Request) -> InternalError:
    """Log an unexpected failure under a stable event name and build the 500"""
    log_event(event, level=logging.ERROR, exc_info=exc, error=str(exc), **_context_fields(request))
    return InternalError()


def error_body(exc: ApiError) -> dict:
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
        )
        error = ValidationError(details=details)
        return JSONResponse(status_code=error.status_code, content=error_body(error))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        error = internal_error(exc, "unhandled_error", request)
        return JSONResponse(status_code=error.status_code, content=error_body(error))
