"""
Comment Models

Class comments with one level of replies, admin visibility control
and per-user likes.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from contenthub.database import Base


class ClassComment(Base):
    """
    Comment on a class.

    Supports:
    - Replies via parent_id (null = top-level comment)
    - Admin-controlled visibility
    - Hard delete with replies and likes cascading
    """

    __tablename__ = "class_comments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("class_comments.id", ondelete="CASCADE"), nullable=True, index=True)

    content = Column(Text, nullable=False)
    is_visible = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    class_item = relationship("ClassItem", back_populates="comments")
    user = relationship("User", back_populates="comments", lazy="selectin")
    parent = relationship("ClassComment", remote_side=[id], back_populates="replies")
    replies = relationship("ClassComment", back_populates="parent", passive_deletes=True)
    likes = relationship("CommentLike", back_populates="comment", passive_deletes=True)

    __table_args__ = (
        Index("ix_class_comments_class_parent", "class_id", "parent_id"),
        Index("ix_class_comments_parent_created", "parent_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ClassComment(id={self.id}, class_id={self.class_id}, user_id={self.user_id})>"


class CommentLike(Base):
    __tablename__ = "comment_likes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    comment_id = Column(Integer, ForeignKey("class_comments.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    comment = relationship("ClassComment", back_populates="likes")

    __table_args__ = (UniqueConstraint("comment_id", "user_id", name="uq_comment_likes_comment_user"),)
