from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contenthub.constants import CLASS_DEFAULT_CATEGORY, GALLERY_DEFAULT_CATEGORY, NEWS_DEFAULT_CATEGORY
from contenthub.models.content import NewsVisibility


# ============================================================================
# Admin form input
# ============================================================================


class ClassInput(BaseModel):
    title: str = Field(..., title="Class Title")
    description: str | None = Field(None, title="Short Description")
    category: str = Field(CLASS_DEFAULT_CATEGORY, title="Category")
    content: str = Field(..., title="MDX Body", description="May contain TEMP_IMAGE_<id> placeholders.")
    is_published: bool = False
    tags: str = Field("", description="Comma-separated tag names.")


class GalleryInput(BaseModel):
    title: str = Field(..., title="Gallery Title")
    subtitle: str | None = None
    description: str | None = Field(None, title="MDX Body")
    caption: str | None = Field(None, title="MDX Caption")
    category: str = Field(GALLERY_DEFAULT_CATEGORY, title="Category")
    is_published: bool = False
    tags: str = Field("", description="Comma-separated tag names.")


class NewsInput(BaseModel):
    title: str = Field(..., title="News Title")
    category: str = Field(NEWS_DEFAULT_CATEGORY, title="Category")
    content: str = Field(..., title="MDX Body")
    is_published: bool = False
    visibility: NewsVisibility = NewsVisibility.PUBLIC


# ============================================================================
# Responses
# ============================================================================


class AuthorOut(BaseModel):
    id: int
    name: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ContentSummary(BaseModel):
    id: int
    title: str
    slug: str
    category: str
    thumbnail_image_url: str | None = None
    is_published: bool
    published_at: datetime | None = None
    view_count: int = 0
    like_count: int = 0
    save_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime
    tags: list[str] = []

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, value: Any) -> list[str]:
        if not value:
            return []
        return [tag if isinstance(tag, str) else tag.name for tag in value]


class ClassDetail(ContentSummary):
    description: str | None = None
    content_mdx: str
    cover_image_urls: list[str] = []
    author: AuthorOut | None = None


class GalleryDetail(ContentSummary):
    subtitle: str | None = None
    description: str | None = None
    caption: str | None = None
    image_urls: list[str] = []
    author: AuthorOut | None = None


class NewsDetail(ContentSummary):
    content_mdx: str
    visibility: NewsVisibility
    cover_image_urls: list[str] = []
    author: AuthorOut | None = None


class ContentPage(BaseModel):
    items: list[ContentSummary]
    total: int
    page: int
    limit: int


class MutationResult(BaseModel):
    success: bool = True
    id: int
    slug: str


class BatchDeleteRequest(BaseModel):
    ids: list[int] = Field(..., min_length=1, description="IDs of the items to delete.")


class FailedItem(BaseModel):
    id: int
    error: str


class BatchResult(BaseModel):
    success: bool
    processed_count: int
    processed: list[int]
    failed: list[FailedItem] = []
