"""Per-post attribute store rows (one row per post and storage key)."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from restmeta.database import Base


class PostMeta(Base):
    __tablename__ = "post_meta"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    meta_key = Column(String(255), nullable=False, index=True)
    meta_value = Column(JSON, nullable=True)

    post = relationship("Post", back_populates="meta")

    __table_args__ = (UniqueConstraint("post_id", "meta_key", name="uq_post_meta_post_key"),)
