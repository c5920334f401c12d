"""Error taxonomy shared by services and routes.

Every error carries a stable, user-facing message and an HTTP status. The
handlers registered in `picito.main` render them as
``{"error": <message>, "timestamp": <iso-8601>}``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
import structlog

log = structlog.get_logger()

class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request data"

class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"

class InvalidToken(Unauthorized):
    default_message = "Invalid or expired session"

class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"

class NotFound(AppError):
    status_code = 404
    default_message = "Not found"

class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"

class DuplicateMembership(Conflict):
    default_message = "User is already a member of this organization"

class LastOwnerViolation(Conflict):
    default_message = "Cannot remove the last owner from an organization"

class TooManyRequests(AppError):
    status_code = 429
    default_message = "Too many requests"

class InternalError(AppError):
    pass

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "timestamp": now_iso()})

def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request.failed", path=request.url.path, error=exc.message)
        return error_response(exc.status_code, AppError.default_message)
    return error_response(exc.status_code, exc.message)

def _http_error_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message)

def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request data"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        msg = first.get("msg", message)
        message = f"{field}: {msg}" if field else msg
    log.info("request.invalid", path=request.url.path, error=message)
    return error_response(400, message)

def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.unhandled", path=request.url.path, error_type=exc.__class__.__name__)
    return error_response(500, AppError.default_message)

def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
