"""Tweet model - short text posts on a user's channel"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from vidtube.models.base import Base, new_id, utcnow


class Tweet(Base):
    __tablename__ = "tweets"

    id = Column(String(36), primary_key=True, default=new_id)
    content = Column(Text, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User")
    likes = relationship("Like", back_populates="tweet", cascade="all, delete-orphan")
