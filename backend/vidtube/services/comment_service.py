"""Comment service"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session, joinedload

from vidtube.core.errors import ValidationError
from vidtube.core.permissions import get_or_404, get_owned_resource
from vidtube.models.comment import Comment
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.schemas.responses import build_comment_response
from vidtube.utils.pagination import paginate

logger = logging.getLogger(__name__)


def _require_content(content: Optional[str]) -> str:
    if not (content or "").strip():
        raise ValidationError("Comment content is required!")
    return content.strip()


def list_video_comments(db: Session, raw_video_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
    """Newest first"""
    video = get_or_404(db, Video, raw_video_id, "video")
    q = (
        db.query(Comment)
        .options(joinedload(Comment.owner))
        .filter(Comment.video_id == video.id)
        .order_by(Comment.created_at.desc(), Comment.id)
    )
    return paginate(q, page, limit, build_comment_response)


def add_comment(db: Session, actor: User, raw_video_id: str, content: Optional[str]) -> Comment:
    content = _require_content(content)
    video = get_or_404(db, Video, raw_video_id, "video")

    comment = Comment(content=content, video_id=video.id, owner_id=actor.id)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def update_comment(db: Session, actor: User, raw_comment_id: str, content: Optional[str]) -> Comment:
    comment = get_owned_resource(db, Comment, raw_comment_id, actor.id, "comment", action="update")
    comment.content = _require_content(content)
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, actor: User, raw_comment_id: str) -> None:
    """Owner-only; the comment's likes are removed with it"""
    comment = get_owned_resource(db, Comment, raw_comment_id, actor.id, "comment", action="delete")
    db.delete(comment)
    db.commit()
    logger.info(f"User {actor.id} deleted comment {comment.id}")
