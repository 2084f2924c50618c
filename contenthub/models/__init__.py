from .user import RoleEnum, User
from .tag import Tag, class_tags, gallery_tags
from .content import ClassItem, Gallery, News, NewsVisibility
from .comment import ClassComment, CommentLike
from .engagement import ClassLike, ClassSave, GalleryLike, GallerySave

__all__ = [
    "RoleEnum",
    "User",
    "Tag",
    "class_tags",
    "gallery_tags",
    "ClassItem",
    "Gallery",
    "News",
    "NewsVisibility",
    "ClassComment",
    "CommentLike",
    "ClassLike",
    "ClassSave",
    "GalleryLike",
    "GallerySave",
]
