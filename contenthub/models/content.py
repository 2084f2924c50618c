"""
Content Models

Classes, galleries and news share the same publishing columns and
counters; each table adds the fields its editor form produces.
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declared_attr, relationship

from contenthub.database import Base
from contenthub.models.tag import class_tags, gallery_tags


class NewsVisibility(str, enum.Enum):
    PUBLIC = "public"
    MEMBER = "member"


class ContentItemMixin:
    """Columns common to every publishable content type."""

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String, index=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    category = Column(String, nullable=False, index=True)
    thumbnail_image_url = Column(Text, nullable=True)
    is_published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime, nullable=True)

    view_count = Column(Integer, default=0, nullable=False)
    like_count = Column(Integer, default=0, nullable=False)
    save_count = Column(Integer, default=0, nullable=False)
    comment_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @declared_attr
    def author_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr
    def author(cls):
        return relationship("User", lazy="selectin")


class ClassItem(ContentItemMixin, Base):
    __tablename__ = "classes"

    description = Column(Text, nullable=True)
    content_mdx = Column(Text, nullable=False, default="")
    cover_image_urls = Column(JSON, nullable=False, default=list)

    tags = relationship("Tag", secondary=class_tags, back_populates="classes", lazy="selectin", passive_deletes=True)
    comments = relationship("ClassComment", back_populates="class_item", passive_deletes=True)

    __table_args__ = (Index("idx_classes_published", "is_published", "created_at"),)

    def __repr__(self) -> str:
        return f"<ClassItem(id={self.id}, slug={self.slug})>"


class Gallery(ContentItemMixin, Base):
    __tablename__ = "galleries"

    subtitle = Column(String, nullable=True)
    # description and caption are both MDX bodies that may embed uploaded images
    description = Column(Text, nullable=True)
    caption = Column(Text, nullable=True)
    image_urls = Column(JSON, nullable=False, default=list)

    tags = relationship("Tag", secondary=gallery_tags, back_populates="galleries", lazy="selectin", passive_deletes=True)

    __table_args__ = (Index("idx_galleries_published", "is_published", "created_at"),)

    def __repr__(self) -> str:
        return f"<Gallery(id={self.id}, slug={self.slug})>"


class News(ContentItemMixin, Base):
    __tablename__ = "news"

    content_mdx = Column(Text, nullable=False, default="")
    visibility = Column(Enum(NewsVisibility), default=NewsVisibility.PUBLIC, nullable=False)
    cover_image_urls = Column(JSON, nullable=False, default=list)

    __table_args__ = (Index("idx_news_published", "is_published", "created_at"),)

    def __repr__(self) -> str:
        return f"<News(id={self.id}, slug={self.slug})>"
