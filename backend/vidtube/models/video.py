"""Video model"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer, Float, Boolean, Index
from sqlalchemy.orm import relationship
from vidtube.models.base import Base, new_id, utcnow


class Video(Base):
    """Published (or unpublished) videos"""
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_file = Column(String(1024), nullable=False)  # Media host URL
    thumbnail = Column(String(1024), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(Float, default=0.0, nullable=False)  # Seconds, as reported by the media probe
    views = Column(Integer, default=0, nullable=False)
    is_published = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="videos")
    comments = relationship("Comment", back_populates="video", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="video", cascade="all, delete-orphan")
    playlist_entries = relationship("PlaylistVideo", back_populates="video", cascade="all, delete-orphan")
    watch_entries = relationship("WatchHistoryEntry", back_populates="video", cascade="all, delete-orphan")

    # Composite indexes for common query patterns
    __table_args__ = (
        Index('ix_videos_published_created', 'is_published', 'created_at'),
    )
