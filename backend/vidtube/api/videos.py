"""Videos API routes"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from vidtube.core.security import require_auth
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.common import api_response
from vidtube.schemas.responses import build_video_response
from vidtube.services.storage.media_service import MediaHost, get_media_host
from vidtube.services.video_service import (
    delete_video, get_video, list_videos, publish_video, toggle_publish_status, update_video
)

router = APIRouter(prefix="/api/v1/videos", tags=["videos"])
upload_logger = logging.getLogger("upload")


@router.get("")
def get_all_videos(
    page: int = Query(1),
    limit: int = Query(10),
    query: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_type: Optional[str] = Query(None, alias="sortType"),
    user_id: Optional[str] = Query(None, alias="userId"),
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """Published videos, searchable by title/description and filterable by owner"""
    result = list_videos(db, page, limit, query, sort_by, sort_type, user_id)
    return api_response(result, "Videos fetched successfully")


@router.post("")
def publish_a_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    upload_logger.info(
        f"Video upload started for user {user.id}: {video_file.filename if video_file else None}"
    )
    video = publish_video(db, media_host, user, title, description, video_file, thumbnail)
    return api_response(build_video_response(video), "Video published successfully", status_code=201)


@router.get("/{video_id}")
def get_video_by_id(video_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    video = get_video(db, video_id)
    return api_response(build_video_response(video), "Video fetched successfully")


@router.patch("/{video_id}")
def update_video_details(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    video = update_video(db, media_host, user, video_id, title, description, thumbnail)
    return api_response(build_video_response(video), "Video updated successfully")


@router.delete("/{video_id}")
def delete_a_video(
    video_id: str,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host)
):
    delete_video(db, media_host, user, video_id)
    return api_response({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}")
def toggle_publish(video_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    video = toggle_publish_status(db, user, video_id)
    return api_response(
        {"id": video.id, "isPublished": video.is_published},
        "Video publish status toggled successfully"
    )
