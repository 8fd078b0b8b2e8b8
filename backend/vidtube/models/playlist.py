"""Playlist model"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer, Index
from sqlalchemy.orm import relationship
from vidtube.models.base import Base, new_id, utcnow


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User")
    entries = relationship(
        "PlaylistVideo",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistVideo.id"
    )


class PlaylistVideo(Base):
    """Ordered playlist membership (insertion order via autoincrement id)"""
    __tablename__ = "playlist_videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    playlist_id = Column(String(36), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    added_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    playlist = relationship("Playlist", back_populates="entries")
    video = relationship("Video", back_populates="playlist_entries")

    __table_args__ = (
        Index('ix_playlist_videos_playlist_video', 'playlist_id', 'video_id', unique=True),
    )
