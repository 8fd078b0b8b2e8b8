"""Account, channel profile and watch history operations for authenticated users"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy.orm import Session, joinedload

from vidtube.core.config import settings
from vidtube.core.errors import ConflictError, NotFoundError, ValidationError
from vidtube.core.permissions import get_or_404
from vidtube.models.subscription import Subscription
from vidtube.models.user import User, WatchHistoryEntry
from vidtube.models.video import Video
from vidtube.schemas.responses import build_video_response
from vidtube.services.auth_service import normalize_email
from vidtube.services.storage.media_service import (
    MediaHost, delete_from_media_host, upload_to_media_host
)

logger = logging.getLogger(__name__)


def update_account(db: Session, user: User, full_name: Optional[str], email: Optional[str]) -> User:
    if not (full_name or "").strip() or not (email or "").strip():
        raise ValidationError("All fields are required!")

    email = normalize_email(email)
    taken = db.query(User).filter(User.email == email, User.id != user.id).first()
    if taken:
        raise ConflictError("Email is already in use!")

    user.full_name = full_name.strip()
    user.email = email
    db.commit()
    db.refresh(user)
    return user


def _replace_image(db: Session, media_host: MediaHost, user: User, upload: Optional[UploadFile],
                   attribute: str, folder: str, label: str) -> User:
    """Upload the new image first, then drop the old one so a failed upload keeps the current image"""
    if upload is None or not upload.filename:
        raise ValidationError(f"{label} file is missing!")

    asset = upload_to_media_host(media_host, upload, folder, label)
    previous_url = getattr(user, attribute)

    setattr(user, attribute, asset.url)
    db.commit()
    db.refresh(user)

    delete_from_media_host(media_host, previous_url)
    logger.info(f"Replaced {attribute} for user {user.id}")
    return user


def update_avatar(db: Session, media_host: MediaHost, user: User, avatar: Optional[UploadFile]) -> User:
    return _replace_image(db, media_host, user, avatar, "avatar", "avatars", "Avatar")


def update_cover_image(db: Session, media_host: MediaHost, user: User, cover_image: Optional[UploadFile]) -> User:
    return _replace_image(db, media_host, user, cover_image, "cover_image", "covers", "Cover image")


def get_channel_profile(db: Session, username: Optional[str], viewer: User) -> Dict[str, Any]:
    """Public channel page for username, with subscription counts relative to viewer"""
    if not (username or "").strip():
        raise ValidationError("Username is missing!")

    channel = db.query(User).filter(User.user_name == username.strip().lower()).first()
    if not channel:
        raise NotFoundError("Channel does not exist!")

    subscribers_count = db.query(Subscription).filter(Subscription.channel_id == channel.id).count()
    subscribed_to_count = db.query(Subscription).filter(Subscription.subscriber_id == channel.id).count()
    is_subscribed = db.query(Subscription).filter(
        Subscription.channel_id == channel.id,
        Subscription.subscriber_id == viewer.id
    ).first() is not None

    return {
        "id": channel.id,
        "fullName": channel.full_name,
        "userName": channel.user_name,
        "email": channel.email,
        "avatar": channel.avatar,
        "coverImage": channel.cover_image or "",
        "subscribersCount": subscribers_count,
        "channelsSubscribedToCount": subscribed_to_count,
        "isSubscribed": is_subscribed,
        "createdAt": channel.created_at.isoformat() if channel.created_at else None,
    }


def get_watch_history(db: Session, user: User, order: Optional[str] = None) -> List[Dict[str, Any]]:
    """Watched videos with owner summaries

    Args:
        order: "recent_first" or "append"; defaults to settings.WATCH_HISTORY_ORDER
    """
    order = order or settings.WATCH_HISTORY_ORDER
    if order not in ("recent_first", "append"):
        raise ValueError(f"Unknown watch history order: {order}")

    # Entry ids grow with every (re)watch, so they double as a recency sequence
    sequence = WatchHistoryEntry.id.desc() if order == "recent_first" else WatchHistoryEntry.id.asc()
    entries = (
        db.query(WatchHistoryEntry)
        .options(joinedload(WatchHistoryEntry.video).joinedload(Video.owner))
        .filter(WatchHistoryEntry.user_id == user.id)
        .order_by(sequence)
        .all()
    )
    return [build_video_response(entry.video) for entry in entries]


def add_to_watch_history(db: Session, user: User, raw_video_id: str) -> List[Dict[str, Any]]:
    """Record that user watched the video; a re-watch moves it to the newest position"""
    video = get_or_404(db, Video, raw_video_id, "video")

    db.query(WatchHistoryEntry).filter(
        WatchHistoryEntry.user_id == user.id,
        WatchHistoryEntry.video_id == video.id
    ).delete(synchronize_session=False)
    db.add(WatchHistoryEntry(user_id=user.id, video_id=video.id))
    db.commit()

    return get_watch_history(db, user)
