"""Security dependencies, cookies, and request helpers"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from vidtube.core.config import settings, ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from vidtube.core.errors import ApiError, AuthenticationError, InvalidTokenError
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.services.token_service import verify_access_token

security_logger = logging.getLogger("security")
api_access_logger = logging.getLogger("api_access")

_bearer = HTTPBearer(auto_error=False)


def extract_access_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[str]:
    """Access token from the accessToken cookie, falling back to Authorization: Bearer"""
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials is not None and credentials.credentials:
        token = credentials.credentials
    return token


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: Session = Depends(get_db)
) -> User:
    """Dependency: Require authentication, return the current user

    The user is also attached to ``request.state.user``. Any failure short-circuits
    with a 401 before the route body runs.
    """
    token = extract_access_token(request, credentials)
    if not token:
        raise AuthenticationError("Unauthorized request")

    try:
        user_id = verify_access_token(token)
    except AuthenticationError as e:
        security_logger.info(f"Access token rejected - Path: {request.url.path}, Reason: {e.message}")
        raise

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise InvalidTokenError("Invalid access token")

    request.state.user = user
    return user


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for rate limiting

    Verified access tokens are keyed per user; anything else, including
    an unverifiable token, falls back to the client IP.
    """
    token = extract_access_token(request)
    if not token:
        scheme, _, value = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() == "bearer" and value:
            token = value.strip()
    if token:
        try:
            return f"user:{verify_access_token(token)}"
        except ApiError:
            pass

    # Fallback to IP address
    client_ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not client_ip:
        client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"


def log_api_access(
    request: Request,
    status_code: int = 200,
    error: Optional[str] = None
):
    """Log detailed API access information"""
    client_ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not client_ip:
        client_ip = request.client.host if request.client else "unknown"

    user = getattr(request.state, "user", None)

    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "method": request.method,
        "path": request.url.path,
        "query": str(request.url.query) if request.url.query else None,
        "user_id": user.id if user is not None else None,
        "client_ip": client_ip,
        "user_agent": request.headers.get("User-Agent", "unknown"),
        "status_code": status_code,
        "error": error
    }

    if error or status_code >= 400:
        api_access_logger.warning(f"API Access: {json.dumps(log_data)}")
    else:
        api_access_logger.info(f"API Access: {json.dumps(log_data)}")


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Set httpOnly access/refresh cookies"""
    secure = settings.ENVIRONMENT == "production"
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        secure=secure,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=refresh_token,
        httponly=True,
        secure=secure,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
