"""Token service - issues and verifies access/refresh JWTs

Access tokens carry the user id plus a few profile claims and are checked on
every protected request. Refresh tokens carry only the user id and a random
``jti``; a SHA-256 of the latest one is stored on the user, so issuing a new
pair invalidates every refresh token issued before it.
"""
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple

import jwt
from sqlalchemy.orm import Session

from vidtube.core.config import settings
from vidtube.core.errors import InternalError, InvalidTokenError, TokenExpiredError
from vidtube.models.user import User

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security")

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _require_secret(secret: str, name: str) -> str:
    if not secret:
        raise InternalError(f"{name} is not configured")
    return secret


def create_access_token(user: User) -> str:
    """Short-lived token presented on every protected request"""
    secret = _require_secret(settings.ACCESS_TOKEN_SECRET, "ACCESS_TOKEN_SECRET")
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": user.id,
        "email": user.email,
        "userName": user.user_name,
        "fullName": user.full_name,
        "type": ACCESS_TOKEN_TYPE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def create_refresh_token(user_id: str) -> str:
    """Long-lived token exchanged for a new pair; jti keeps same-second issues distinct"""
    secret = _require_secret(settings.REFRESH_TOKEN_SECRET, "REFRESH_TOKEN_SECRET")
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": user_id,
        "type": REFRESH_TOKEN_TYPE,
        "jti": secrets.token_hex(16),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def _decode(token: str, secret: str, expected_type: str) -> Dict[str, Any]:
    if not token:
        raise InvalidTokenError("Unauthorized request")
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError(f"{expected_type.capitalize()} token expired")
    except jwt.InvalidTokenError:
        raise InvalidTokenError(f"Invalid {expected_type} token")

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise InvalidTokenError(f"Invalid {expected_type} token")
    return payload


def issue_tokens(user: User, db: Session) -> Tuple[str, str]:
    """Issue a new access/refresh pair and persist the refresh hash (overwriting the previous one)

    Returns:
        tuple: (access_token, refresh_token)
    """
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user.id)

    user.refresh_token_hash = hash_refresh_token(refresh_token)
    db.commit()
    db.refresh(user)

    return access_token, refresh_token


def verify_access_token(token: str) -> str:
    """Return the user id encoded in a valid access token"""
    secret = _require_secret(settings.ACCESS_TOKEN_SECRET, "ACCESS_TOKEN_SECRET")
    payload = _decode(token, secret, ACCESS_TOKEN_TYPE)
    return str(payload["sub"])


def verify_refresh_token(token: str, db: Session) -> User:
    """Return the user owning a valid, current refresh token

    Fails when the signature is bad, the token expired, the user no longer
    exists, or the token is not the one most recently issued to the user.
    """
    secret = _require_secret(settings.REFRESH_TOKEN_SECRET, "REFRESH_TOKEN_SECRET")
    payload = _decode(token, secret, REFRESH_TOKEN_TYPE)

    user = db.query(User).filter(User.id == str(payload["sub"])).first()
    if not user:
        raise InvalidTokenError("Invalid refresh token")

    stored = user.refresh_token_hash
    if not stored or not hmac.compare_digest(stored, hash_refresh_token(token)):
        security_logger.warning(f"Stale or revoked refresh token presented for user {user.id}")
        raise InvalidTokenError("Refresh token is expired or used")

    return user


def revoke_refresh_token(user: User, db: Session) -> None:
    """Clear the stored refresh hash so no outstanding refresh token verifies"""
    user.refresh_token_hash = None
    db.commit()
