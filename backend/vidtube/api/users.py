"""User API routes - registration, session lifecycle, account, channel profile, watch history"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from vidtube.core.config import REFRESH_TOKEN_COOKIE
from vidtube.core.security import clear_auth_cookies, require_auth, set_auth_cookies
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.auth import (
    ChangePasswordRequest, LoginRequest, RefreshTokenRequest, UpdateAccountRequest
)
from vidtube.schemas.common import api_response
from vidtube.schemas.responses import build_user_response
from vidtube.services.auth_service import (
    build_login_payload, change_password, login_user, logout_user, refresh_tokens, register_user
)
from vidtube.services.storage.media_service import MediaHost, get_media_host
from vidtube.services.user_service import (
    add_to_watch_history, get_channel_profile, get_watch_history,
    update_account, update_avatar, update_cover_image
)

router = APIRouter(prefix="/api/v1/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.post("/register")
def register(
    user_name: Optional[str] = Form(None, alias="userName"),
    email: Optional[str] = Form(None),
    full_name: Optional[str] = Form(None, alias="fullName"),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: Session = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    """Create an account (multipart: profile fields, avatar required, cover image optional)"""
    user = register_user(db, media_host, user_name, email, full_name, password, avatar, cover_image)
    return api_response(build_user_response(user), "User registered successfully", status_code=201)


@router.post("/login")
def login(request_data: LoginRequest, db: Session = Depends(get_db)):
    """Login with userName or email; sets the accessToken and refreshToken cookies"""
    result = login_user(db, request_data.user_name, request_data.email, request_data.password)
    response = api_response(build_login_payload(result), "User logged in successfully")
    set_auth_cookies(response, result["access_token"], result["refresh_token"])
    return response


@router.post("/logout")
def logout(user: User = Depends(require_auth), db: Session = Depends(get_db)):
    logout_user(db, user)
    response = api_response({}, "User logged out successfully")
    clear_auth_cookies(response)
    return response


@router.post("/refresh-token")
def refresh_access_token(
    request: Request,
    request_data: Optional[RefreshTokenRequest] = None,
    db: Session = Depends(get_db)
):
    """Rotate the token pair; refresh token comes from the cookie or the JSON body"""
    incoming = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not incoming and request_data is not None:
        incoming = request_data.refresh_token

    result = refresh_tokens(db, incoming)
    response = api_response(
        {"accessToken": result["access_token"], "refreshToken": result["refresh_token"]},
        "Access token refreshed"
    )
    set_auth_cookies(response, result["access_token"], result["refresh_token"])
    return response


@router.post("/change-password")
def change_current_password(
    request_data: ChangePasswordRequest,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    change_password(db, user, request_data.old_password, request_data.new_password)
    return api_response({}, "Password changed successfully")


@router.get("/current-user")
def current_user(user: User = Depends(require_auth)):
    return api_response(build_user_response(user), "Current user fetched successfully")


@router.patch("/update-account")
def update_account_details(
    request_data: UpdateAccountRequest,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    user = update_account(db, user, request_data.full_name, request_data.email)
    return api_response(build_user_response(user), "Account details updated successfully")


@router.patch("/avatar")
def update_user_avatar(
    avatar: Optional[UploadFile] = File(None),
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    user = update_avatar(db, media_host, user, avatar)
    return api_response(build_user_response(user), "Avatar updated successfully")


@router.patch("/cover-image")
def update_user_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    user = update_cover_image(db, media_host, user, cover_image)
    return api_response(build_user_response(user), "Cover image updated successfully")


@router.get("/c/{username}")
def channel_profile(username: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    profile = get_channel_profile(db, username, user)
    return api_response(profile, "User channel fetched successfully")


@router.get("/history")
def watch_history(user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(get_watch_history(db, user), "Watch history fetched successfully")


@router.patch("/watch/{video_id}")
def record_watch(video_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    history = add_to_watch_history(db, user, video_id)
    return api_response(history, "Watch history updated successfully")
