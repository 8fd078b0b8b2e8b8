"""SQLAlchemy models package - imports all models so they register with Base.metadata"""
from vidtube.models.base import Base
from vidtube.models.user import User, WatchHistoryEntry
from vidtube.models.video import Video
from vidtube.models.comment import Comment
from vidtube.models.tweet import Tweet
from vidtube.models.playlist import Playlist, PlaylistVideo
from vidtube.models.like import Like
from vidtube.models.subscription import Subscription

# Export all for convenience
__all__ = [
    "Base", "User", "WatchHistoryEntry", "Video", "Comment", "Tweet",
    "Playlist", "PlaylistVideo", "Like", "Subscription"
]
