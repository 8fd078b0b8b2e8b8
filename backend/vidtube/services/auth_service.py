"""Authentication service - business logic for registration, login and token rotation"""
import logging
from typing import Dict, Optional

import bcrypt
from fastapi import UploadFile
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidtube.core.errors import (
    AuthenticationError, ConflictError, NotFoundError, ValidationError
)
from vidtube.core.metrics import login_attempts_counter, token_refresh_counter
from vidtube.models.user import User
from vidtube.schemas.responses import build_user_response
from vidtube.services.storage.media_service import (
    MediaHost, delete_from_media_host, upload_to_media_host
)
from vidtube.services.token_service import issue_tokens, revoke_refresh_token, verify_refresh_token

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security")

_email_adapter = TypeAdapter(EmailStr)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    if not password_hash or not password:
        return False
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def normalize_email(email: str) -> str:
    try:
        return str(_email_adapter.validate_python(email.strip())).lower()
    except PydanticValidationError:
        raise ValidationError("Invalid email address!")


def find_user_by_login(db: Session, user_name: Optional[str] = None, email: Optional[str] = None) -> Optional[User]:
    """Match on handle or email, whichever were supplied"""
    clauses = []
    if user_name and user_name.strip():
        clauses.append(User.user_name == user_name.strip().lower())
    if email and email.strip():
        clauses.append(User.email == email.strip().lower())
    if not clauses:
        return None
    return db.query(User).filter(or_(*clauses)).first()


def register_user(
    db: Session,
    media_host: MediaHost,
    user_name: Optional[str],
    email: Optional[str],
    full_name: Optional[str],
    password: Optional[str],
    avatar: Optional[UploadFile],
    cover_image: Optional[UploadFile] = None,
) -> User:
    """Create a new account

    Duplicate checks run before any media is uploaded, so a rejected
    registration leaves neither a user row nor uploaded files behind.

    Raises:
        ValidationError: Blank field, bad email, or missing avatar
        ConflictError: Handle or email already registered
    """
    if any(not (field or "").strip() for field in (full_name, email, user_name, password)):
        raise ValidationError("All fields are required!")

    user_name = user_name.strip().lower()
    email = normalize_email(email)

    if find_user_by_login(db, user_name=user_name, email=email):
        raise ConflictError("User with this email or username already exists!")

    if avatar is None or not avatar.filename:
        raise ValidationError("Avatar file is required!")

    avatar_asset = upload_to_media_host(media_host, avatar, "avatars", "Avatar")
    cover_url = ""
    if cover_image is not None and cover_image.filename:
        try:
            cover_url = upload_to_media_host(media_host, cover_image, "covers", "Cover image").url
        except Exception:
            delete_from_media_host(media_host, avatar_asset.url)
            raise

    user = User(
        user_name=user_name,
        email=email,
        full_name=full_name.strip(),
        password_hash=hash_password(password),
        avatar=avatar_asset.url,
        cover_image=cover_url,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same handle/email
        db.rollback()
        delete_from_media_host(media_host, avatar_asset.url)
        delete_from_media_host(media_host, cover_url)
        raise ConflictError("User with this email or username already exists!")

    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.user_name})")
    return user


def login_user(db: Session, user_name: Optional[str], email: Optional[str], password: Optional[str]) -> Dict:
    """Authenticate and issue a fresh token pair

    Returns:
        dict with ``user`` (ORM object), ``access_token`` and ``refresh_token``
    """
    if not (user_name or "").strip() and not (email or "").strip():
        raise ValidationError("Username or email is required!")

    user = find_user_by_login(db, user_name=user_name, email=email)
    if not user:
        login_attempts_counter.labels(status="unknown_user").inc()
        raise NotFoundError("User does not exist!")

    if not verify_password(password or "", user.password_hash):
        login_attempts_counter.labels(status="failed").inc()
        security_logger.warning(f"Failed login for user {user.id}")
        raise AuthenticationError("Invalid user credentials!")

    access_token, refresh_token = issue_tokens(user, db)
    login_attempts_counter.labels(status="success").inc()
    logger.info(f"User {user.id} logged in")

    return {"user": user, "access_token": access_token, "refresh_token": refresh_token}


def logout_user(db: Session, user: User) -> None:
    revoke_refresh_token(user, db)
    logger.info(f"User {user.id} logged out")


def refresh_tokens(db: Session, incoming_refresh_token: Optional[str]) -> Dict:
    """Exchange a current refresh token for a new pair (the presented token stops working)"""
    if not incoming_refresh_token:
        token_refresh_counter.labels(status="missing").inc()
        raise AuthenticationError("Unauthorized request")

    try:
        user = verify_refresh_token(incoming_refresh_token, db)
    except AuthenticationError:
        token_refresh_counter.labels(status="rejected").inc()
        raise

    access_token, refresh_token = issue_tokens(user, db)
    token_refresh_counter.labels(status="success").inc()
    return {"user": user, "access_token": access_token, "refresh_token": refresh_token}


def change_password(db: Session, user: User, old_password: Optional[str], new_password: Optional[str]) -> None:
    if not old_password or not (new_password or "").strip():
        raise ValidationError("Old and new password are required!")

    if not verify_password(old_password, user.password_hash):
        raise ValidationError("Invalid old password!")

    user.password_hash = hash_password(new_password)
    db.commit()
    security_logger.info(f"Password changed for user {user.id}")


def build_login_payload(result: Dict) -> Dict:
    return {
        "user": build_user_response(result["user"]),
        "accessToken": result["access_token"],
        "refreshToken": result["refresh_token"],
    }
