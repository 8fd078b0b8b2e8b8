"""Response shaping - ORM rows to camelCase dicts for the JSON envelope"""
from typing import Any, Dict, Optional

from vidtube.models.comment import Comment
from vidtube.models.like import Like
from vidtube.models.playlist import Playlist
from vidtube.models.tweet import Tweet
from vidtube.models.user import User
from vidtube.models.video import Video


def _ts(value):
    return value.isoformat() if value is not None else None


def build_owner_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    """Public fields shown wherever another user is embedded"""
    if user is None:
        return None
    return {
        "id": user.id,
        "userName": user.user_name,
        "fullName": user.full_name,
        "avatar": user.avatar,
    }


def build_user_response(user: User) -> Dict[str, Any]:
    """Full user record minus password hash and refresh token"""
    return {
        "id": user.id,
        "userName": user.user_name,
        "email": user.email,
        "fullName": user.full_name,
        "avatar": user.avatar,
        "coverImage": user.cover_image or "",
        "createdAt": _ts(user.created_at),
        "updatedAt": _ts(user.updated_at),
    }


def build_video_response(video: Video) -> Dict[str, Any]:
    return {
        "id": video.id,
        "videoFile": video.video_file,
        "thumbnail": video.thumbnail,
        "title": video.title,
        "description": video.description,
        "duration": video.duration,
        "views": video.views,
        "isPublished": video.is_published,
        "owner": build_owner_summary(video.owner),
        "createdAt": _ts(video.created_at),
        "updatedAt": _ts(video.updated_at),
    }


def build_comment_response(comment: Comment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "content": comment.content,
        "video": comment.video_id,
        "owner": build_owner_summary(comment.owner),
        "createdAt": _ts(comment.created_at),
        "updatedAt": _ts(comment.updated_at),
    }


def build_tweet_response(tweet: Tweet) -> Dict[str, Any]:
    return {
        "id": tweet.id,
        "content": tweet.content,
        "owner": build_owner_summary(tweet.owner),
        "createdAt": _ts(tweet.created_at),
        "updatedAt": _ts(tweet.updated_at),
    }


def build_playlist_response(playlist: Playlist) -> Dict[str, Any]:
    return {
        "id": playlist.id,
        "name": playlist.name,
        "description": playlist.description,
        "owner": build_owner_summary(playlist.owner),
        "videos": [build_video_response(entry.video) for entry in playlist.entries],
        "createdAt": _ts(playlist.created_at),
        "updatedAt": _ts(playlist.updated_at),
    }


def build_like_response(like: Like) -> Dict[str, Any]:
    return {
        "id": like.id,
        "video": like.video_id,
        "comment": like.comment_id,
        "tweet": like.tweet_id,
        "likedBy": build_owner_summary(like.liked_by),
        "createdAt": _ts(like.created_at),
    }
