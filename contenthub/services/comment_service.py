"""
Comment Service

Paged class comments with replies, comment mutations with author/admin
checks, comment likes and moderation.
"""

import logging
from datetime import datetime

from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.config import settings
from contenthub.exceptions import (
    AuthorizationError,
    CommentNotFoundError,
    ContentHubError,
    ContentNotFoundError,
    ValidationError,
)
from contenthub.models.comment import ClassComment, CommentLike
from contenthub.models.content import ClassItem
from contenthub.models.user import User

logger = logging.getLogger(__name__)

SORT_LATEST = "latest"
SORT_POPULAR = "popular"
SORT_ORDERS = (SORT_LATEST, SORT_POPULAR)


def clamp_page(offset: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp paging input: ``offset`` >= 0, ``limit`` within 1..max page size."""
    offset = max(0, offset or 0)
    if limit is None:
        limit = settings.comments_page_size
    limit = min(max(1, limit), settings.comments_max_page_size)
    return offset, limit


def normalize_sort_order(sort_order: str | None) -> str:
    return sort_order if sort_order in SORT_ORDERS else SORT_LATEST


def _author(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "avatar_url": user.avatar_url}


def serialize_comment(comment: ClassComment, likes_count: int = 0, is_liked: bool = False) -> dict:
    return {
        "id": comment.id,
        "class_id": comment.class_id,
        "parent_id": comment.parent_id,
        "user_id": comment.user_id,
        "content": comment.content,
        "is_visible": comment.is_visible,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
        "author": _author(comment.user),
        "likes_count": likes_count,
        "is_liked": is_liked,
    }


class CommentService:
    """Service for class comments and their moderation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_class(self, class_id: int) -> ClassItem:
        item = await self.db.get(ClassItem, class_id)
        if item is None:
            raise ContentNotFoundError("Class", class_id)
        return item

    async def _get_comment(self, comment_id: int) -> ClassComment:
        comment = await self.db.get(ClassComment, comment_id)
        if comment is None:
            raise CommentNotFoundError(comment_id)
        return comment

    async def _like_counts(self, comment_ids: list[int]) -> dict[int, int]:
        if not comment_ids:
            return {}
        result = await self.db.execute(
            select(CommentLike.comment_id, func.count(CommentLike.id))
            .where(CommentLike.comment_id.in_(comment_ids))
            .group_by(CommentLike.comment_id)
        )
        return {comment_id: count for comment_id, count in result.all()}

    async def _liked_by(self, comment_ids: list[int], user_id: int | None) -> set[int]:
        if not comment_ids or user_id is None:
            return set()
        result = await self.db.execute(
            select(CommentLike.comment_id).where(
                CommentLike.comment_id.in_(comment_ids),
                CommentLike.user_id == user_id,
            )
        )
        return set(result.scalars().all())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_comments_page(
        self,
        class_id: int,
        viewer: User | None = None,
        offset: int | None = 0,
        limit: int | None = None,
        sort_order: str | None = SORT_LATEST,
    ) -> dict:
        """
        Get one page of top-level comments followed by all their replies.

        Args:
            class_id: Class whose comments are listed
            viewer: Current user; admins also see hidden comments
            offset: Number of top-level comments to skip
            limit: Page size, clamped to 1..comments_max_page_size
            sort_order: ``latest`` (newest first) or ``popular`` (most liked,
                newest first on ties); anything else means ``latest``

        Returns:
            ``{"comments": [...], "totalTopLevel": n}`` where the total counts
            top-level comments only
        """
        offset, limit = clamp_page(offset, limit)
        sort_order = normalize_sort_order(sort_order)
        await self._get_class(class_id)

        filters = [ClassComment.class_id == class_id, ClassComment.parent_id.is_(None)]
        if not (viewer and viewer.is_admin):
            filters.append(ClassComment.is_visible.is_(True))

        total = await self.db.scalar(select(func.count(ClassComment.id)).where(*filters)) or 0

        query = select(ClassComment).where(*filters)
        if sort_order == SORT_POPULAR:
            like_counts = (
                select(CommentLike.comment_id, func.count(CommentLike.id).label("likes"))
                .group_by(CommentLike.comment_id)
                .subquery()
            )
            query = query.outerjoin(like_counts, like_counts.c.comment_id == ClassComment.id).order_by(
                func.coalesce(like_counts.c.likes, 0).desc(),
                ClassComment.created_at.desc(),
                ClassComment.id.desc(),
            )
        else:
            query = query.order_by(ClassComment.created_at.desc(), ClassComment.id.desc())

        result = await self.db.execute(query.offset(offset).limit(limit))
        top_level = list(result.scalars().all())
        if not top_level:
            return {"comments": [], "totalTopLevel": total}

        top_ids = [comment.id for comment in top_level]
        reply_filters = [ClassComment.parent_id.in_(top_ids)]
        if not (viewer and viewer.is_admin):
            reply_filters.append(ClassComment.is_visible.is_(True))
        result = await self.db.execute(
            select(ClassComment)
            .where(*reply_filters)
            .order_by(ClassComment.created_at.asc(), ClassComment.id.asc())
        )
        replies = list(result.scalars().all())

        merged = top_level + replies
        comment_ids = [comment.id for comment in merged]
        like_counts_map = await self._like_counts(comment_ids)
        liked = await self._liked_by(comment_ids, viewer.id if viewer else None)

        comments = [
            serialize_comment(comment, like_counts_map.get(comment.id, 0), comment.id in liked)
            for comment in merged
        ]
        return {"comments": comments, "totalTopLevel": total}

    async def list_admin_comments(
        self, actor: User, page: int = 1, limit: int = 100, class_id: int | None = None
    ) -> dict:
        """
        Every comment across classes for moderation, newest first.

        Hidden comments and replies are included; each row names its class
        and author so the admin table needs no further lookups.
        """
        if not actor.is_admin:
            raise AuthorizationError("Only admins can list all comments")

        filters = []
        if class_id is not None:
            filters.append(ClassComment.class_id == class_id)

        total = await self.db.scalar(select(func.count(ClassComment.id)).where(*filters)) or 0
        result = await self.db.execute(
            select(ClassComment, ClassItem.title, ClassItem.slug)
            .join(ClassItem, ClassItem.id == ClassComment.class_id)
            .where(*filters)
            .order_by(ClassComment.created_at.desc(), ClassComment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = result.all()
        likes = await self._like_counts([comment.id for comment, _, _ in rows])

        items = [
            {
                "id": comment.id,
                "class_id": comment.class_id,
                "class_title": title,
                "class_slug": slug,
                "parent_id": comment.parent_id,
                "user_id": comment.user_id,
                "author_name": comment.user.name if comment.user else None,
                "content": comment.content,
                "is_visible": comment.is_visible,
                "likes_count": likes.get(comment.id, 0),
                "created_at": comment.created_at,
            }
            for comment, title, slug in rows
        ]
        return {"items": items, "total": total, "page": page, "limit": limit}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_comment(self, class_id: int, user: User, content: str, parent_id: int | None = None) -> dict:
        """
        Create a comment or a reply.

        Replies must target a top-level comment of the same class.
        """
        item = await self._get_class(class_id)
        if not item.is_published and not user.is_admin:
            raise ContentNotFoundError("Class", class_id)

        if parent_id is not None:
            parent = await self.db.get(ClassComment, parent_id)
            if parent is None or parent.class_id != class_id:
                raise ValidationError("Parent comment not found in this class", field="parent_id")
            if parent.parent_id is not None:
                raise ValidationError("Replies cannot be nested", field="parent_id")

        comment = ClassComment(class_id=class_id, user_id=user.id, parent_id=parent_id, content=content)
        self.db.add(comment)
        item.comment_count = (item.comment_count or 0) + 1
        await self.db.commit()
        await self.db.refresh(comment, attribute_names=["user"])

        logger.info(f"Comment created: id={comment.id}, class={class_id}, user={user.id}")
        return serialize_comment(comment)

    async def update_comment(self, comment_id: int, user: User, content: str) -> dict:
        """Only the author can edit a comment."""
        comment = await self._get_comment(comment_id)
        if comment.user_id != user.id:
            raise AuthorizationError("Only the author can edit this comment")

        comment.content = content
        comment.updated_at = datetime.utcnow()
        await self.db.commit()

        likes = await self._like_counts([comment.id])
        liked = await self._liked_by([comment.id], user.id)
        logger.info(f"Comment updated: id={comment_id}")
        return serialize_comment(comment, likes.get(comment.id, 0), comment.id in liked)

    async def delete_comment(self, comment_id: int, user: User) -> int:
        """
        Hard delete a comment together with its replies.

        The author or an admin may delete.

        Returns:
            Number of comments removed
        """
        comment = await self._get_comment(comment_id)
        if comment.user_id != user.id and not user.is_admin:
            raise AuthorizationError("You can only delete your own comments")

        result = await self.db.execute(select(ClassComment.id).where(ClassComment.parent_id == comment_id))
        ids = [comment_id, *result.scalars().all()]

        await self.db.execute(delete(CommentLike).where(CommentLike.comment_id.in_(ids)))
        await self.db.execute(delete(ClassComment).where(ClassComment.parent_id == comment_id))
        await self.db.execute(delete(ClassComment).where(ClassComment.id == comment_id))

        item = await self.db.get(ClassItem, comment.class_id)
        if item is not None:
            item.comment_count = max(0, (item.comment_count or 0) - len(ids))

        await self.db.commit()

        logger.info(f"Comment deleted: id={comment_id} with {len(ids) - 1} repl(ies) by user={user.id}")
        return len(ids)

    async def toggle_comment_like(self, comment_id: int, user: User) -> dict:
        comment = await self._get_comment(comment_id)
        if not comment.is_visible and not user.is_admin:
            raise CommentNotFoundError(comment_id)

        result = await self.db.execute(
            select(CommentLike).where(and_(CommentLike.comment_id == comment_id, CommentLike.user_id == user.id))
        )
        existing = result.scalar_one_or_none()

        if existing:
            await self.db.delete(existing)
            liked = False
        else:
            self.db.add(CommentLike(comment_id=comment_id, user_id=user.id))
            liked = True
        await self.db.commit()

        likes = await self._like_counts([comment_id])
        return {"comment_id": comment_id, "liked": liked, "likes_count": likes.get(comment_id, 0)}

    async def toggle_visibility(self, comment_id: int, actor: User) -> dict:
        """Flip a comment's visibility. Admin only."""
        if not actor.is_admin:
            raise AuthorizationError("Only admins can change comment visibility")

        comment = await self._get_comment(comment_id)
        comment.is_visible = not comment.is_visible
        await self.db.commit()

        logger.info(f"Comment {comment_id} visibility set to {comment.is_visible} by admin={actor.id}")
        return {"id": comment.id, "is_visible": comment.is_visible}

    async def set_visibility_bulk(self, comment_ids: list[int], is_visible: bool, actor: User) -> dict:
        """
        Set visibility on several comments, reporting per-id results.

        Updates run one after another on the request session.
        """
        if not actor.is_admin:
            raise AuthorizationError("Only admins can change comment visibility")

        processed: list[int] = []
        failed: list[dict] = []
        for comment_id in dict.fromkeys(comment_ids):
            try:
                comment = await self._get_comment(comment_id)
                comment.is_visible = is_visible
                await self.db.commit()
                processed.append(comment_id)
            except ContentHubError as e:
                await self.db.rollback()
                failed.append({"id": comment_id, "error": e.message})

        logger.info(f"Bulk visibility={is_visible}: {len(processed)} updated, {len(failed)} failed")
        return {
            "success": not failed,
            "processed_count": len(processed),
            "processed": processed,
            "failed": failed,
        }
