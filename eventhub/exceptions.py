"""Error taxonomy shared by the services and the HTTP layer.

Services raise these instead of ``HTTPException`` so they stay usable outside a
request. ``setup_exception_handlers`` maps each one to its status code with the
response body::

    {"detail": "Human-readable message", "errors": {"field": "message"}}

``errors`` is only present for field-level validation failures, including
payloads the request schemas reject before any validator runs.
"""
import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class EventHubError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid payload."

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class InvalidCategory(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Category name is not allowed."


class InvalidCredentials(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Password incorrect."


class InactiveUser(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Inactive user."


class CapacityExceeded(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Event already full."


class AlreadyWaiting(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already postulating to this event."


class AlreadyApproved(EventHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already participating in this event."


class Unauthorized(EventHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials."


class Forbidden(EventHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Operation not permitted."


class NotFound(EventHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class DuplicateResource(EventHubError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists."


class InternalError(EventHubError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def eventhub_error_handler(request: Request, exc: EventHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error["loc"]]
        field = ".".join(loc[1:]) or loc[0]
        errors.setdefault(field, error["msg"])
    logger.warning(f"Rejected payload on {request.method} {request.url.path}: {sorted(errors)}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": ValidationError.default_message, "errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": InternalError.default_message},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EventHubError, eventhub_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
