"""Channel dashboard - aggregate stats for the acting user's own channel"""
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from vidtube.models.like import Like
from vidtube.models.subscription import Subscription
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.schemas.responses import build_video_response
from vidtube.services.video_service import VIDEO_SORT_FIELDS
from vidtube.utils.pagination import apply_sort, paginate


def get_channel_stats(db: Session, user: User) -> Dict[str, int]:
    """Totals across all of the user's videos, published or not"""
    total_videos, total_views = (
        db.query(func.count(Video.id), func.coalesce(func.sum(Video.views), 0))
        .filter(Video.owner_id == user.id)
        .one()
    )
    total_subscribers = db.query(Subscription).filter(Subscription.channel_id == user.id).count()
    total_likes = (
        db.query(Like)
        .join(Video, Like.video_id == Video.id)
        .filter(Video.owner_id == user.id)
        .count()
    )
    return {
        "totalVideos": int(total_videos),
        "totalSubscribers": total_subscribers,
        "totalViews": int(total_views),
        "totalLikes": total_likes,
    }


def get_channel_videos(
    db: Session,
    user: User,
    page: int = 1,
    limit: int = 10,
    sort_by: Optional[str] = None,
    sort_type: Optional[str] = None,
) -> Dict[str, Any]:
    q = db.query(Video).options(joinedload(Video.owner)).filter(Video.owner_id == user.id)
    q = apply_sort(q, VIDEO_SORT_FIELDS, sort_by, sort_type, default="createdAt")
    return paginate(q, page, limit, build_video_response)
