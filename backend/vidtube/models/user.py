"""User model"""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from vidtube.models.base import Base, new_id, utcnow


class User(Base):
    """User accounts - also the channel other users subscribe to"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    user_name = Column(String(64), unique=True, nullable=False, index=True)  # Stored lower-cased
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=False)  # Media host URL
    cover_image = Column(String(1024), default="", nullable=False)
    password_hash = Column(String(255), nullable=False)
    refresh_token_hash = Column(String(64), nullable=True)  # SHA-256 of the current refresh token
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    videos = relationship("Video", back_populates="owner", cascade="all, delete-orphan")
    watch_history = relationship(
        "WatchHistoryEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="WatchHistoryEntry.id"
    )


class WatchHistoryEntry(Base):
    """One row per (user, video); re-watching replaces the row so id order is watch order"""
    __tablename__ = "watch_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    watched_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="watch_history")
    video = relationship("Video", back_populates="watch_entries")

    __table_args__ = (
        Index('ix_watch_history_user_video', 'user_id', 'video_id', unique=True),
    )
