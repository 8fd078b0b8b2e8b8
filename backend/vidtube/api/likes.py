"""Likes API routes"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidtube.core.security import require_auth
from vidtube.db.session import get_db
from vidtube.models.user import User
from vidtube.schemas.common import api_response
from vidtube.services.like_service import get_liked_videos, toggle_like

router = APIRouter(prefix="/api/v1/likes", tags=["likes"])


def _toggle_response(result: dict):
    message = "Liked successfully" if result["isLiked"] else "Like removed successfully"
    return api_response(result, message)


@router.post("/toggle/v/{video_id}")
def toggle_video_like(video_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return _toggle_response(toggle_like(db, user, "video", video_id))


@router.post("/toggle/c/{comment_id}")
def toggle_comment_like(comment_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return _toggle_response(toggle_like(db, user, "comment", comment_id))


@router.post("/toggle/t/{tweet_id}")
def toggle_tweet_like(tweet_id: str, user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return _toggle_response(toggle_like(db, user, "tweet", tweet_id))


@router.get("/videos")
def liked_videos(user: User = Depends(require_auth), db: Session = Depends(get_db)):
    return api_response(get_liked_videos(db, user), "Liked videos fetched successfully")
