"""Service error taxonomy and the FastAPI handlers that render it.

Every error leaves the service as ``{"error": message}`` with no traceback in
the body. Client errors are logged with context, server errors with the
traceback.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UploadRejectedError(InvalidInputError):
    default_message = "Invalid file type"


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ServiceError):
    # Conflicts are reported as 400 with a distinct message.
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Conflict"


class DuplicateEmailError(ConflictError):
    default_message = "Email already registered"


class StoreError(ServiceError):
    default_message = "Database error"


class ServerError(ServiceError):
    default_message = "Server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc.__cause__ or exc,
        )
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_response(exc.status_code, exc.message)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("%s %s rejected malformed body: %s", request.method, request.url.path, exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    # The server middleware re-raises after this response, so the traceback is logged there.
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, type(exc).__name__)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, ServerError.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _handle_service_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
