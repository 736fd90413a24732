from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from restmeta.database import Base


class Post(Base):
    """An addressable content entity exposed through the posts API."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    post_type = Column(String(20), default="post", nullable=False)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False, default="")
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    author = relationship("User", back_populates="posts", lazy="selectin")
    meta = relationship("PostMeta", back_populates="post", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_posts_post_type", "post_type"),)
