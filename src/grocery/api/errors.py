"""Error envelope and exception-to-response mapping.

Every failure leaves the API as ``{"success": false, "message", "error"}``
where ``error`` is a stable machine-readable kind.
"""

from enum import Enum

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


class ApiError(Exception):
    """An error raised at the HTTP edge (authentication, authorization, input)."""

    def __init__(self, status_code: int, kind: ErrorKind, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.kind = kind
        self.message = message


def error_response(status_code: int, kind: ErrorKind, message: str, details=None) -> JSONResponse:
    content = {"success": False, "message": message, "error": kind.value}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def first_message(exc: Exception, default: str = "Request failed") -> str:
    """The first human-readable message carried by a domain exception."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, (list, tuple)) and value:
                return str(value[0])
            if value:
                return str(value)
    if isinstance(messages, str) and messages:
        return messages
    if exc.args and isinstance(exc.args[0], str):
        return exc.args[0]
    return default


async def api_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(exc.status_code, exc.kind, exc.message)


async def domain_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    messages = getattr(exc, "messages", None)
    details = messages if isinstance(messages, dict) else None
    return error_response(status.HTTP_400_BAD_REQUEST, ErrorKind.VALIDATION, first_message(exc), details)


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, ErrorKind.NOT_FOUND, first_message(exc, "Not found"))


async def conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, ErrorKind.CONFLICT, first_message(exc))


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = [
        {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]} for error in exc.errors()
    ]
    logger.warning("request validation failed", path=request.url.path, errors=errors)
    message = f"{errors[0]['field']}: {errors[0]['message']}" if errors else "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, ErrorKind.VALIDATION, message, errors)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled exception", method=request.method, path=request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorKind.INTERNAL, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(ValidationError, domain_validation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(InvalidOperationError, conflict_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
