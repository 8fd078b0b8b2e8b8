"""Comments API routes"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vidtube.core.security import require_auth
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.common import api_response
from vidtube.schemas.content import ContentRequest
from vidtube.schemas.responses import build_comment_response
from vidtube.services.comment_service import (
    add_comment, delete_comment, list_video_comments, update_comment
)

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])


@router.get("/{video_id}")
def get_video_comments(
    video_id: str,
    page: int = Query(1),
    limit: int = Query(10),
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    return api_response(list_video_comments(db, video_id, page, limit), "Comments fetched successfully")


@router.post("/{video_id}")
def add_video_comment(
    video_id: str,
    request_data: ContentRequest,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    comment = add_comment(db, user, video_id, request_data.content)
    return api_response(build_comment_response(comment), "Comment added successfully", status_code=201)


@router.patch("/c/{comment_id}")
def update_video_comment(
    comment_id: str,
    request_data: ContentRequest,
    user: User = Depends(require_auth),
    db: Session = Depends(get_db)
):
    comment = update_comment(db, user, comment_id, request_data.content)
    return api_response(build_comment_response(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}")
def delete_video_comment(comment_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    delete_comment(db, user, comment_id)
    return api_response({}, "Comment deleted successfully")
