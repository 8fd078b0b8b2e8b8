"""Video service - publishing, listing and owner-only mutations"""
import logging
from typing import Any, Dict, Optional

from fastapi import UploadFile
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from vidtube.core.errors import NotFoundError, ValidationError
from vidtube.core.permissions import get_or_404, get_owned_resource
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.schemas.responses import build_video_response
from vidtube.services.storage.media_service import (
    MediaHost, delete_from_media_host, upload_to_media_host
)
from vidtube.utils.ids import ensure_valid_id
from vidtube.utils.pagination import apply_sort, paginate

logger = logging.getLogger(__name__)

# Public sort keys -> columns
VIDEO_SORT_FIELDS = {
    "createdAt": Video.created_at,
    "updatedAt": Video.updated_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


def list_videos(
    db: Session,
    page: int = 1,
    limit: int = 10,
    query: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_type: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Paginated published videos, optionally filtered by text and owner"""
    q = db.query(Video).options(joinedload(Video.owner)).filter(Video.is_published.is_(True))

    if query and query.strip():
        pattern = f"%{query.strip()}%"
        q = q.filter(or_(Video.title.ilike(pattern), Video.description.ilike(pattern)))

    if user_id:
        owner_id = ensure_valid_id(user_id, "user")
        if not db.query(User.id).filter(User.id == owner_id).first():
            raise NotFoundError("User not found!")
        q = q.filter(Video.owner_id == owner_id)

    q = apply_sort(q, VIDEO_SORT_FIELDS, sort_by, sort_type, default="createdAt")
    return paginate(q, page, limit, build_video_response)


def publish_video(
    db: Session,
    media_host: MediaHost,
    owner: User,
    title: Optional[str],
    description: Optional[str],
    video_file: Optional[UploadFile],
    thumbnail: Optional[UploadFile],
) -> Video:
    if not (title or "").strip() or not (description or "").strip():
        raise ValidationError("Title and description are required!")
    if video_file is None or not video_file.filename:
        raise ValidationError("Video file is required!")
    if thumbnail is None or not thumbnail.filename:
        raise ValidationError("Thumbnail is required!")

    video_asset = upload_to_media_host(media_host, video_file, "videos", "Video")
    try:
        thumbnail_asset = upload_to_media_host(media_host, thumbnail, "thumbnails", "Thumbnail")
    except Exception:
        delete_from_media_host(media_host, video_asset.url)
        raise

    video = Video(
        owner_id=owner.id,
        title=title.strip(),
        description=description.strip(),
        video_file=video_asset.url,
        thumbnail=thumbnail_asset.url,
        duration=video_asset.duration or 0.0,
    )
    db.add(video)
    db.commit()
    db.refresh(video)

    logger.info(f"User {owner.id} published video {video.id}")
    return video


def get_video(db: Session, raw_video_id: str) -> Video:
    """Fetch a video and count the view"""
    video = get_or_404(db, Video, raw_video_id, "video")

    # Increment in SQL so concurrent viewers do not overwrite each other
    db.query(Video).filter(Video.id == video.id).update(
        {Video.views: Video.views + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(video)
    return video


def update_video(
    db: Session,
    media_host: MediaHost,
    actor: User,
    raw_video_id: str,
    title: Optional[str],
    description: Optional[str],
    thumbnail: Optional[UploadFile] = None,
) -> Video:
    """Owner-only update of title, description and (optionally) thumbnail"""
    video = get_owned_resource(db, Video, raw_video_id, actor.id, "video", action="update")

    if not (title or "").strip() or not (description or "").strip():
        raise ValidationError("Title and description are required!")

    previous_thumbnail = None
    if thumbnail is not None and thumbnail.filename:
        asset = upload_to_media_host(media_host, thumbnail, "thumbnails", "Thumbnail")
        previous_thumbnail = video.thumbnail
        video.thumbnail = asset.url

    video.title = title.strip()
    video.description = description.strip()
    db.commit()
    db.refresh(video)

    if previous_thumbnail:
        delete_from_media_host(media_host, previous_thumbnail)
    return video


def delete_video(db: Session, media_host: MediaHost, actor: User, raw_video_id: str) -> None:
    """Owner-only delete; likes, comments and playlist memberships go with it"""
    video = get_owned_resource(db, Video, raw_video_id, actor.id, "video", action="delete")
    media_urls = [video.video_file, video.thumbnail]

    db.delete(video)
    db.commit()
    logger.info(f"User {actor.id} deleted video {video.id}")

    for url in media_urls:
        delete_from_media_host(media_host, url)


def toggle_publish_status(db: Session, actor: User, raw_video_id: str) -> Video:
    video = get_owned_resource(db, Video, raw_video_id, actor.id, "video", action="update")
    video.is_published = not video.is_published
    db.commit()
    db.refresh(video)
    return video
