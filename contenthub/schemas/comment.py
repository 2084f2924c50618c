from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contenthub.schemas.content import AuthorOut


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    parent_id: int | None = Field(None, description="Parent comment ID for replies")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class CommentOut(BaseModel):
    id: int
    class_id: int
    parent_id: int | None = None
    user_id: int
    content: str
    is_visible: bool
    created_at: datetime
    updated_at: datetime
    author: AuthorOut | None = None
    likes_count: int = 0
    is_liked: bool = False

    model_config = ConfigDict(from_attributes=True)


class CommentsPage(BaseModel):
    comments: list[CommentOut]
    total_top_level: int = Field(..., alias="totalTopLevel")

    model_config = ConfigDict(populate_by_name=True)


class CommentLikeResult(BaseModel):
    comment_id: int
    liked: bool
    likes_count: int


class CommentVisibilityResult(BaseModel):
    id: int
    is_visible: bool


class BulkVisibilityRequest(BaseModel):
    ids: list[int] = Field(..., min_length=1)
    is_visible: bool


class AdminCommentRow(BaseModel):
    id: int
    class_id: int
    class_title: str
    class_slug: str
    parent_id: int | None = None
    user_id: int
    author_name: str | None = None
    content: str
    is_visible: bool
    likes_count: int = 0
    created_at: datetime


class AdminCommentsPage(BaseModel):
    items: list[AdminCommentRow]
    total: int
    page: int
    limit: int
