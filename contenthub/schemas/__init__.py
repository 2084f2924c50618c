from .content import (
    AuthorOut,
    BatchDeleteRequest,
    BatchResult,
    ClassDetail,
    ClassInput,
    ContentPage,
    ContentSummary,
    FailedItem,
    GalleryDetail,
    GalleryInput,
    MutationResult,
    NewsDetail,
    NewsInput,
)
from .comment import (
    AdminCommentRow,
    AdminCommentsPage,
    BulkVisibilityRequest,
    CommentCreate,
    CommentLikeResult,
    CommentOut,
    CommentsPage,
    CommentUpdate,
    CommentVisibilityResult,
)
from .engagement import ClassEngagementResult, GalleryEngagementResult

__all__ = [
    "AuthorOut",
    "BatchDeleteRequest",
    "BatchResult",
    "ClassDetail",
    "ClassInput",
    "ContentPage",
    "ContentSummary",
    "FailedItem",
    "GalleryDetail",
    "GalleryInput",
    "MutationResult",
    "NewsDetail",
    "NewsInput",
    "AdminCommentRow",
    "AdminCommentsPage",
    "BulkVisibilityRequest",
    "CommentCreate",
    "CommentLikeResult",
    "CommentOut",
    "CommentsPage",
    "CommentUpdate",
    "CommentVisibilityResult",
    "ClassEngagementResult",
    "GalleryEngagementResult",
]
