"""
Error taxonomy and the JSON error envelope.

Every failure leaves the API as:
    {"error": "<human readable message>", "details": <optional>}

Raise one of the APIError subclasses from a route or service; the handlers
registered by register_exception_handlers() do the translation.
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger(__name__)


class APIError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(APIError):
    """Malformed or missing input."""
    status_code = 400


class Unauthorized(APIError):
    """No session, invalid session or wrong role."""
    status_code = 401


class NotFound(APIError):
    status_code = 404


class ExternalServiceError(APIError):
    """The database, auth, storage or model call failed."""
    status_code = 500


class ConfigurationError(APIError):
    """A required credential is missing."""
    status_code = 500


def error_body(message: str, details: Any = None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return body


async def api_error_handler(request: Request, exc: APIError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    details = None if isinstance(exc.detail, str) else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body("Invalid request", details))


async def unhandled_exception_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
