# platform_common/errors.py

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ServiceError(Exception):
    """Base for every failure that is rendered to a client as {"error": message}."""

    status_code = 500
    default_message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ServiceError):
    status_code = 400
    default_message = "Bad request"


class Unauthenticated(ServiceError):
    status_code = 401
    default_message = "Invalid token"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class RateLimited(ServiceError):
    status_code = 429
    default_message = "Too many requests, please try again later."

    def __init__(self, message: str = None, retry_after: int = 1):
        super().__init__(message)
        self.retry_after = retry_after


class Unavailable(ServiceError):
    status_code = 503
    default_message = "Service unavailable"


class Internal(ServiceError):
    status_code = 500


def error_response(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def install_error_handlers(app: FastAPI) -> None:
    """Render every failure leaving the app in the uniform {"error": ...} shape."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        headers = None
        if isinstance(exc, RateLimited):
            headers = {"Retry-After": str(exc.retry_after)}
        return error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else INTERNAL_ERROR_MESSAGE
        return error_response(exc.status_code, message, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request on {request.method} {request.url.path}: {exc.errors()}")
        return error_response(400, "Invalid request")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(500, INTERNAL_ERROR_MESSAGE)
