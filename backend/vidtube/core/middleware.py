"""Middleware configuration for FastAPI application"""
import logging

from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vidtube.core.config import settings
from vidtube.core.errors import error_body
from vidtube.core.security import get_client_identifier, log_api_access
from vidtube.db.redis import check_rate_limit

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security")

# Paths that are never rate limited
UNLIMITED_PATHS = {"/health", "/metrics"}


def get_allowed_origins():
    """Get list of allowed CORS origins"""
    allowed_origins = [settings.FRONTEND_URL]
    if settings.ENVIRONMENT == "development":
        allowed_origins.extend([
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173"
        ])
    return allowed_origins


def setup_cors_middleware(app):
    """Setup CORS middleware for FastAPI app"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


async def security_middleware(request: Request, call_next):
    """Middleware for rate limiting and API access logging"""
    status_code = 500
    error = None

    try:
        path = request.url.path

        if path not in UNLIMITED_PATHS and request.method != "OPTIONS":
            identifier = get_client_identifier(request)
            is_state_changing = request.method in ["POST", "PATCH", "DELETE", "PUT"]
            try:
                allowed = check_rate_limit(identifier, strict=is_state_changing)
            except Exception as e:
                # Fail open when Redis is unavailable
                security_logger.error(f"Rate limit check failed, allowing request: {e}")
                allowed = True

            if not allowed:
                status_code = 429
                error = "Rate limit exceeded"
                security_logger.warning(f"Rate limit exceeded - Identifier: {identifier}, Path: {path}")
                return JSONResponse(
                    status_code=429,
                    content=error_body(429, "Rate limit exceeded. Please try again later.")
                )

        response = await call_next(request)
        status_code = response.status_code
        return response

    except Exception as e:
        error = str(e)
        security_logger.error(f"Security middleware error: {error}", exc_info=True)
        raise
    finally:
        log_api_access(request, status_code, error)
