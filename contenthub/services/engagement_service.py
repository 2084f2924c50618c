"""
Engagement Service

Like and save toggles for classes and galleries. Each toggle keeps the
denormalized counter on the content row in step with the pair table.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.exceptions import ContentNotFoundError
from contenthub.models.content import ClassItem, Gallery
from contenthub.models.engagement import ClassLike, ClassSave, GalleryLike, GallerySave
from contenthub.models.user import User

logger = logging.getLogger(__name__)


class EngagementService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _toggle(self, content_model, pair_model, key: str, item_id: int, user: User, counter: str) -> dict:
        """
        Add the (item, user) pair if missing, remove it otherwise.

        Drafts are only reachable by admins.

        Returns:
            ``{key: item_id, "active": bool, "count": int}``
        """
        item = await self.db.get(content_model, item_id)
        if item is None or (not item.is_published and not user.is_admin):
            raise ContentNotFoundError(content_model.__name__.replace("Item", ""), item_id)

        user_id = user.id
        column = getattr(pair_model, key)
        result = await self.db.execute(
            select(pair_model).where(column == item_id, pair_model.user_id == user_id)
        )
        existing = result.scalar_one_or_none()

        current = getattr(item, counter) or 0
        if existing:
            await self.db.delete(existing)
            setattr(item, counter, max(0, current - 1))
            active = False
        else:
            self.db.add(pair_model(**{key: item_id, "user_id": user_id}))
            setattr(item, counter, current + 1)
            active = True
        await self.db.commit()

        count = getattr(item, counter)
        logger.info(f"{pair_model.__tablename__}: {key}={item_id} user={user_id} active={active}")
        return {key: item_id, "active": active, "count": count}

    async def toggle_class_like(self, class_id: int, user: User) -> dict:
        return await self._toggle(ClassItem, ClassLike, "class_id", class_id, user, "like_count")

    async def toggle_class_save(self, class_id: int, user: User) -> dict:
        return await self._toggle(ClassItem, ClassSave, "class_id", class_id, user, "save_count")

    async def toggle_gallery_like(self, gallery_id: int, user: User) -> dict:
        return await self._toggle(Gallery, GalleryLike, "gallery_id", gallery_id, user, "like_count")

    async def toggle_gallery_save(self, gallery_id: int, user: User) -> dict:
        return await self._toggle(Gallery, GallerySave, "gallery_id", gallery_id, user, "save_count")
