# backend/app/api/errors.py
"""
Maps core errors to HTTP responses.

    ValidationFailed      -> 400
    StateConflict         -> 400  (recovery token / owner / answer problems)
    AuthenticationFailed  -> 401
    AccessDenied          -> 403
    NotFound              -> 404
    request body invalid  -> 400 VALIDATION_ERROR
    anything else         -> 500, message hidden in production
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.core.config import get_settings
from backend.app.core.errors import (
    AccessDenied,
    AppError,
    AuthenticationFailed,
    ErrorCode,
    NotFound,
    StateConflict,
    ValidationFailed,
)
from backend.app.schemas.common import error_response

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (StateConflict, status.HTTP_400_BAD_REQUEST),
    (AuthenticationFailed, status.HTTP_401_UNAUTHORIZED),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
)


def status_for(error: AppError) -> int:
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = status_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content=error_response(exc.code.value),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else first.get("msg", "invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response(ErrorCode.VALIDATION_ERROR.value, message),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = getattr(request.app.state, "settings", None) or get_settings()
    message = "An unexpected error occurred" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(ErrorCode.INTERNAL_SERVER_ERROR.value, message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
