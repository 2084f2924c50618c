from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from contenthub.database import Base

class_tags = Table(
    "class_tags",
    Base.metadata,
    Column("class_id", Integer, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

gallery_tags = Table(
    "gallery_tags",
    Base.metadata,
    Column("gallery_id", Integer, ForeignKey("galleries.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    slug = Column(String, index=True, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)

    classes = relationship("ClassItem", secondary=class_tags, back_populates="tags", passive_deletes=True)
    galleries = relationship("Gallery", secondary=gallery_tags, back_populates="tags", passive_deletes=True)
