"""Likes on videos, comments and tweets"""
from typing import Any, Dict, List

from sqlalchemy.orm import Session, joinedload

from vidtube.core.permissions import get_or_404
from vidtube.models.comment import Comment
from vidtube.models.like import Like
from vidtube.models.tweet import Tweet
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.schemas.responses import build_like_response, build_video_response
from vidtube.services.toggle_service import toggle_edge

# target kind -> (model, Like foreign key column)
LIKE_TARGETS = {
    "video": (Video, "video_id"),
    "comment": (Comment, "comment_id"),
    "tweet": (Tweet, "tweet_id"),
}


def toggle_like(db: Session, actor: User, kind: str, raw_target_id: str) -> Dict[str, Any]:
    """Like or unlike a target; the target must exist before the toggle runs

    Returns:
        ``{"isLiked": True, "like": {...}}`` when created, ``{"isLiked": False}`` when removed
    """
    model, column = LIKE_TARGETS[kind]
    target = get_or_404(db, model, raw_target_id, kind)

    result = toggle_edge(db, Like, f"{kind}_like", **{"liked_by_id": actor.id, column: target.id})
    if not result.active:
        return {"isLiked": False}

    payload: Dict[str, Any] = {"isLiked": True}
    if result.edge is not None:
        payload["like"] = build_like_response(result.edge)
    return payload


def get_liked_videos(db: Session, actor: User) -> List[Dict[str, Any]]:
    """Videos the actor has liked, most recently liked first"""
    likes = (
        db.query(Like)
        .options(joinedload(Like.video).joinedload(Video.owner))
        .filter(Like.liked_by_id == actor.id, Like.video_id.isnot(None))
        .order_by(Like.created_at.desc())
        .all()
    )
    return [
        {"likedAt": like.created_at.isoformat(), "video": build_video_response(like.video)}
        for like in likes
    ]
