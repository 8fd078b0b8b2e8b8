"""API error taxonomy

Services raise these; the handlers registered in ``register_exception_handlers``
turn them into the standard error envelope. Anything else that escapes a route
is logged and reported as a generic 500 so driver/host details never reach the
client.
"""
import logging
from typing import Any, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status"""
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed or missing input (blank content, malformed ID, bad pagination)"""
    status_code = 400
    default_message = "Invalid request"


class ConflictError(ValidationError):
    """Input clashes with existing data (duplicate handle or email)"""
    status_code = 409
    default_message = "Resource already exists"


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class InvalidTokenError(AuthenticationError):
    default_message = "Invalid token"


class TokenExpiredError(AuthenticationError):
    default_message = "Token expired"


class AuthorizationError(ApiError):
    """Valid identity acting on a resource it does not own"""
    status_code = 403
    default_message = "You don't have permission to perform this action"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Resource not found"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal server error"


def error_body(status_code: int, message: str, errors: Optional[List[Any]] = None) -> dict:
    body = {"statusCode": status_code, "message": message, "success": False}
    if errors:
        body["errors"] = errors
    return body


async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message, exc.errors)
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body(400, "Invalid request", errors)
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_body(500, "Internal server error")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)
