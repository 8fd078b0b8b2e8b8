"""Like model - toggle edge between a user and a video, comment or tweet"""
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from vidtube.models.base import Base, new_id, utcnow


class Like(Base):
    """Exactly one of video_id / comment_id / tweet_id is set"""
    __tablename__ = "likes"

    id = Column(String(36), primary_key=True, default=new_id)
    liked_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True)
    comment_id = Column(String(36), ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    tweet_id = Column(String(36), ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    liked_by = relationship("User")
    video = relationship("Video", back_populates="likes")
    comment = relationship("Comment", back_populates="likes")
    tweet = relationship("Tweet", back_populates="likes")

    # NULLs never collide, so each constraint only applies to its own target kind
    __table_args__ = (
        UniqueConstraint('liked_by_id', 'video_id', name='uq_likes_user_video'),
        UniqueConstraint('liked_by_id', 'comment_id', name='uq_likes_user_comment'),
        UniqueConstraint('liked_by_id', 'tweet_id', name='uq_likes_user_tweet'),
    )
