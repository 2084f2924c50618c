"""
Content Service

Create, update and delete flows for classes, galleries and news.

Every flow spans object storage and the database, which share no
transaction. Create registers compensations on a Saga so that a failure
after the base row exists removes the row and the item's storage folder.
Update removes only the objects uploaded by the failing request and rolls
back the database transaction. Delete empties the storage folder first
and removes the row only once that has succeeded.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.config import settings
from contenthub.constants import (
    CLASS_DEFAULT_CATEGORY,
    GALLERY_CATEGORIES,
    GALLERY_DEFAULT_CATEGORY,
    NEWS_CATEGORIES,
    NEWS_DEFAULT_CATEGORY,
    normalize_category,
)
from contenthub.exceptions import (
    AuthenticationError,
    ContentHubError,
    ContentMutationError,
    ContentNotFoundError,
    StorageError,
)
from contenthub.models.content import ClassItem, Gallery, News, NewsVisibility
from contenthub.models.tag import Tag, class_tags, gallery_tags
from contenthub.models.user import User
from contenthub.schemas.content import ClassInput, GalleryInput, NewsInput
from contenthub.services.content_images import (
    delete_removed_images,
    diff_images,
    extract_owned_image_urls,
    replace_temp_images,
    upload_content_images,
    upload_gallery_images,
    upload_temp_images,
)
from contenthub.services.saga import Saga
from contenthub.services.tag_service import process_tags, unlink_all_tags
from contenthub.utils.slugify import generate_unique_slug
from contenthub.utils.storage import ObjectStorage

logger = logging.getLogger(__name__)


@dataclass
class ContentUploads:
    """Images submitted with one admin form, already encoded as WebP."""

    thumbnail: bytes | None = None
    cover: bytes | None = None
    content_images: list[tuple[str, bytes]] = field(default_factory=list)
    gallery_images: list[bytes] = field(default_factory=list)
    # None keeps the gallery's current image_urls untouched
    kept_image_urls: list[str] | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ContentService:
    """Shared flows; subclasses bind the model, bucket and media steps."""

    model = None
    kind = "Content"
    bucket = ""
    link_table = None

    def __init__(self, db: AsyncSession, storage: ObjectStorage):
        self.db = db
        self.storage = storage

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get(self, content_id: int):
        item = await self.db.get(self.model, content_id)
        if item is None:
            raise ContentNotFoundError(self.kind, content_id)
        return item

    def check_access(self, item, viewer: User | None) -> None:
        """Raise if ``viewer`` may not read ``item``."""
        if not item.is_published and not (viewer and viewer.is_admin):
            raise ContentNotFoundError(self.kind, item.slug)

    async def get_by_slug(self, slug: str, viewer: User | None = None, count_view: bool = True):
        """
        Fetch a single item by slug for the public detail page.

        Unpublished items are visible to admins only. Each successful read
        increments ``view_count``.
        """
        result = await self.db.execute(select(self.model).where(self.model.slug == slug))
        item = result.scalar_one_or_none()
        if item is None:
            raise ContentNotFoundError(self.kind, slug)

        self.check_access(item, viewer)

        if count_view:
            await self.db.execute(
                update(self.model)
                .where(self.model.id == item.id)
                # a read is not an edit
                .values(view_count=self.model.view_count + 1, updated_at=self.model.updated_at)
            )
            await self.db.commit()
            await self.db.refresh(item, attribute_names=["view_count"])

        return item

    async def _paginate(self, query, page: int, limit: int):
        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
        result = await self.db.execute(
            query.order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def list_published(
        self,
        page: int = 1,
        limit: int = 12,
        category: str | None = None,
        tag: str | None = None,
    ):
        """Published items, newest first, optionally filtered by category or tag slug."""
        query = select(self.model).where(self.model.is_published.is_(True))
        if category:
            query = query.where(self.model.category == category)
        if tag and self.link_table is not None:
            query = query.where(self.model.tags.any(Tag.slug == tag))
        return await self._paginate(query, page, limit)

    async def list_admin(self, page: int = 1, limit: int = 20, search: str | None = None):
        """Every item, published or not, for the admin table."""
        query = select(self.model)
        if search:
            query = query.where(self.model.title.ilike(f"%{search}%"))
        return await self._paginate(query, page, limit)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _base_values(self, data) -> dict:
        raise NotImplementedError

    async def _create_media(self, item, data, uploads: ContentUploads) -> None:
        """Upload media after the base row exists and store the URLs on it."""

    async def _update_media(self, item, data, uploads: ContentUploads, uploaded: list[str]) -> dict:
        """Sync media for an edit; returns column values to apply."""
        return {}

    async def _delete_row(self, content_id: int) -> None:
        await self.db.execute(delete(self.model).where(self.model.id == content_id))
        await self.db.commit()
        logger.info(f"{self.kind} row {content_id} deleted")

    async def _purge_folder(self, content_id: int) -> None:
        await self.storage.delete_folder(self.bucket, str(content_id))

    async def _remove_uploaded(self, content_id: int, paths: list[str]) -> None:
        prefix = f"{content_id}/"
        owned = [path for path in paths if path.startswith(prefix)]
        if owned:
            await self.storage.remove(self.bucket, owned)
            logger.info(f"Removed {len(owned)} object(s) uploaded for {self.kind.lower()} {content_id}")

    async def _replace_image(
        self,
        content_id: int,
        old_urls: list[str],
        new_path: str,
        data: bytes,
        uploaded: list[str],
        step: str,
    ) -> str:
        """
        Upload a replacement image, then delete the objects behind
        ``old_urls``. If the old objects cannot be deleted the edit is
        aborted; the caller's rollback removes the new upload.
        """
        new_url = await self.storage.upload(self.bucket, new_path, data)
        uploaded.append(new_path)

        prefix = f"{content_id}/"
        old_paths = []
        for url in old_urls:
            path = self.storage.path_from_public_url(self.bucket, url)
            if path and path.startswith(prefix) and path != new_path:
                old_paths.append(path)

        if old_paths:
            try:
                await self.storage.remove(self.bucket, old_paths)
            except StorageError as e:
                raise ContentMutationError(f"Could not delete the previous {step} image", step=step) from e

        return new_url

    async def _sync_bodies(
        self,
        content_id: int,
        old_bodies: list[str | None],
        new_bodies: list[str | None],
        images: list[tuple[str, bytes]],
        uploaded: list[str],
        strip_markdown: bool = False,
    ) -> list[str | None]:
        """
        Upload new body images into every body field, then delete the
        previously uploaded images none of the fields reference anymore.
        """
        old_urls: list[str] = []
        for body in old_bodies:
            old_urls.extend(url for url in extract_owned_image_urls(body, self.bucket, content_id) if url not in old_urls)

        url_map, _ = await upload_temp_images(self.storage, self.bucket, content_id, images, uploaded)
        bodies = [replace_temp_images(body, url_map, strip_markdown) for body in new_bodies]

        new_urls: list[str] = []
        for body in bodies:
            new_urls.extend(extract_owned_image_urls(body, self.bucket, content_id))

        removed, _ = diff_images(old_urls, new_urls)
        await delete_removed_images(self.storage, self.bucket, content_id, removed)
        return bodies

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    async def create(self, data, author_id: int | None, uploads: ContentUploads | None = None) -> tuple[int, str]:
        """
        Create an item and its media.

        Steps: unique slug, base row, thumbnail, type-specific media, tags.
        Any failure after the base row is committed deletes the row and the
        item's storage folder, then re-raises.

        Returns:
            Tuple of (id, slug)
        """
        uploads = uploads or ContentUploads()

        slug = await generate_unique_slug(self.db, self.model, data.title)
        item = self.model(**self._base_values(data), slug=slug, author_id=author_id, thumbnail_image_url=None)
        if item.is_published:
            item.published_at = datetime.utcnow()

        self.db.add(item)
        await self.db.commit()
        content_id = item.id
        logger.info(f"{self.kind} base row created: id={content_id}, slug={slug}")

        saga = Saga(f"{self.kind.lower()} create {content_id}")
        saga.push("insert row", lambda: self._delete_row(content_id))
        saga.push("storage folder", lambda: self._purge_folder(content_id))

        try:
            if uploads.thumbnail:
                item.thumbnail_image_url = await self.storage.upload(
                    self.bucket, f"{content_id}/thumbnail.webp", uploads.thumbnail
                )
                await self.db.commit()

            await self._create_media(item, data, uploads)

            if self.link_table is not None:
                await process_tags(self.db, self.link_table, content_id, data.tags)
                await self.db.commit()
        except Exception as e:
            logger.error(f"{self.kind} create {content_id} failed: {e}")
            await self.db.rollback()
            await saga.rollback()
            raise

        logger.info(f"{self.kind} created: id={content_id}, slug={slug}")
        return content_id, slug

    async def update(self, content_id: int, data, uploads: ContentUploads | None = None):
        """
        Apply an edit. The slug never changes.

        New files are uploaded before old ones are deleted. Tag links and
        column values are written in one transaction. On failure that
        transaction is rolled back and every object uploaded by this call
        is removed; objects already deleted are not restored.
        """
        uploads = uploads or ContentUploads()
        item = await self.get(content_id)

        uploaded: list[str] = []
        saga = Saga(f"{self.kind.lower()} update {content_id}")
        saga.push("uploaded files", lambda: self._remove_uploaded(content_id, uploaded))

        try:
            values = self._base_values(data)

            if uploads.thumbnail:
                values["thumbnail_image_url"] = await self._replace_image(
                    content_id,
                    [item.thumbnail_image_url] if item.thumbnail_image_url else [],
                    f"{content_id}/thumbnail_{uuid.uuid4()}.webp",
                    uploads.thumbnail,
                    uploaded,
                    step="thumbnail",
                )

            values.update(await self._update_media(item, data, uploads, uploaded))

            if self.link_table is not None:
                await unlink_all_tags(self.db, self.link_table, content_id)
                await process_tags(self.db, self.link_table, content_id, data.tags)

            if values.get("is_published") and item.published_at is None:
                values["published_at"] = datetime.utcnow()

            for key, value in values.items():
                setattr(item, key, value)
            item.updated_at = datetime.utcnow()
            await self.db.commit()
        except Exception as e:
            logger.error(f"{self.kind} update {content_id} failed: {e}")
            await self.db.rollback()
            await saga.rollback()
            raise

        logger.info(f"{self.kind} updated: id={content_id}")
        return item

    async def delete(self, content_id: int) -> None:
        """
        Delete an item's storage folder, then its row.

        If the folder cannot be emptied the row is left in place and the
        StorageError propagates.
        """
        item = await self.get(content_id)

        await self._purge_folder(content_id)

        if self.link_table is not None:
            await unlink_all_tags(self.db, self.link_table, content_id)
        await self.db.execute(delete(self.model).where(self.model.id == content_id))
        await self.db.commit()

        logger.info(f"{self.kind} deleted: id={content_id}")

    async def delete_many(self, content_ids: list[int]) -> dict:
        """Delete each id independently and report per-id outcomes."""
        deleted: list[int] = []
        failed: list[dict] = []

        for content_id in dict.fromkeys(content_ids):
            try:
                await self.delete(content_id)
                deleted.append(content_id)
            except ContentHubError as e:
                await self.db.rollback()
                logger.warning(f"{self.kind} {content_id} not deleted: {e.message}")
                failed.append({"id": content_id, "error": e.message})
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"{self.kind} {content_id} not deleted: {e}")
                failed.append({"id": content_id, "error": "Database error"})

        return {
            "success": not failed,
            "processed_count": len(deleted),
            "processed": deleted,
            "failed": failed,
        }


class ClassService(ContentService):
    model = ClassItem
    kind = "Class"
    bucket = settings.class_bucket
    link_table = class_tags

    def _base_values(self, data: ClassInput) -> dict:
        return {
            "title": data.title.strip(),
            "description": _clean(data.description),
            "category": normalize_category(data.category, None, CLASS_DEFAULT_CATEGORY),
            "content_mdx": data.content,
            "is_published": data.is_published,
        }

    async def _create_media(self, item: ClassItem, data: ClassInput, uploads: ContentUploads) -> None:
        if uploads.content_images:
            item.content_mdx, _ = await upload_content_images(
                self.storage, self.bucket, item.id, item.content_mdx, uploads.content_images
            )
            await self.db.commit()

    async def _update_media(self, item: ClassItem, data: ClassInput, uploads: ContentUploads, uploaded: list[str]) -> dict:
        (content_mdx,) = await self._sync_bodies(
            item.id, [item.content_mdx], [data.content], uploads.content_images, uploaded
        )
        return {"content_mdx": content_mdx}


class GalleryService(ContentService):
    model = Gallery
    kind = "Gallery"
    bucket = settings.gallery_bucket
    link_table = gallery_tags

    def _base_values(self, data: GalleryInput) -> dict:
        return {
            "title": data.title.strip(),
            "subtitle": _clean(data.subtitle),
            "description": data.description or None,
            "caption": data.caption or None,
            "category": normalize_category(data.category, GALLERY_CATEGORIES, GALLERY_DEFAULT_CATEGORY),
            "is_published": data.is_published,
        }

    async def _create_media(self, item: Gallery, data: GalleryInput, uploads: ContentUploads) -> None:
        if uploads.content_images:
            # one upload serves both the description and the caption
            url_map, _ = await upload_temp_images(self.storage, self.bucket, item.id, uploads.content_images)
            item.description = replace_temp_images(item.description, url_map, strip_markdown=True)
            item.caption = replace_temp_images(item.caption, url_map, strip_markdown=True)
            await self.db.commit()

        if uploads.gallery_images:
            urls, _ = await upload_gallery_images(self.storage, self.bucket, item.id, uploads.gallery_images)
            item.image_urls = urls
            await self.db.commit()

    async def _update_media(self, item: Gallery, data: GalleryInput, uploads: ContentUploads, uploaded: list[str]) -> dict:
        description, caption = await self._sync_bodies(
            item.id,
            [item.description, item.caption],
            [data.description, data.caption],
            uploads.content_images,
            uploaded,
            strip_markdown=True,
        )

        old_image_urls = list(item.image_urls or [])
        if uploads.kept_image_urls is None:
            kept = old_image_urls
        else:
            kept = [url for url in uploads.kept_image_urls if url in old_image_urls]

        new_urls, _ = await upload_gallery_images(
            self.storage, self.bucket, item.id, uploads.gallery_images, uploaded
        )
        image_urls = kept + new_urls

        removed, _ = diff_images(old_image_urls, image_urls)
        await delete_removed_images(self.storage, self.bucket, item.id, removed)

        return {"description": description or None, "caption": caption or None, "image_urls": image_urls}


class NewsService(ContentService):
    model = News
    kind = "News"
    bucket = settings.news_bucket

    def _base_values(self, data: NewsInput) -> dict:
        return {
            "title": data.title.strip(),
            "category": normalize_category(data.category, NEWS_CATEGORIES, NEWS_DEFAULT_CATEGORY),
            "content_mdx": data.content,
            "is_published": data.is_published,
            "visibility": data.visibility,
        }

    def check_access(self, item: News, viewer: User | None) -> None:
        super().check_access(item, viewer)
        if item.visibility == NewsVisibility.MEMBER and viewer is None:
            raise AuthenticationError("Log in to read this news")

    async def _create_media(self, item: News, data: NewsInput, uploads: ContentUploads) -> None:
        if uploads.cover:
            cover_url = await self.storage.upload(self.bucket, f"{item.id}/cover.webp", uploads.cover)
            item.cover_image_urls = [cover_url]
            await self.db.commit()

        if uploads.content_images:
            item.content_mdx, _ = await upload_content_images(
                self.storage, self.bucket, item.id, item.content_mdx, uploads.content_images
            )
            await self.db.commit()

    async def _update_media(self, item: News, data: NewsInput, uploads: ContentUploads, uploaded: list[str]) -> dict:
        values = {}
        if uploads.cover:
            cover_url = await self._replace_image(
                item.id,
                list(item.cover_image_urls or []),
                f"{item.id}/cover_{uuid.uuid4()}.webp",
                uploads.cover,
                uploaded,
                step="cover",
            )
            values["cover_image_urls"] = [cover_url]

        (content_mdx,) = await self._sync_bodies(
            item.id, [item.content_mdx], [data.content], uploads.content_images, uploaded
        )
        values["content_mdx"] = content_mdx
        return values
