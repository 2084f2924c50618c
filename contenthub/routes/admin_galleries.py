"""
Admin Gallery Routes
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.auth import require_admin
from contenthub.constants import GALLERY_DEFAULT_CATEGORY
from contenthub.database import get_db
from contenthub.models.user import User
from contenthub.schemas.content import (
    BatchDeleteRequest,
    BatchResult,
    ContentPage,
    GalleryDetail,
    GalleryInput,
    MutationResult,
)
from contenthub.services.content_service import GalleryService
from contenthub.utils.forms import collect_uploads, form_flag, require_fields
from contenthub.utils.storage import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/galleries", tags=["Admin Galleries"])


def _gallery_input(title, subtitle, description, caption, category, is_published, tags) -> GalleryInput:
    return GalleryInput(
        title=title,
        subtitle=subtitle,
        description=description,
        caption=caption,
        category=category or GALLERY_DEFAULT_CATEGORY,
        is_published=form_flag(is_published),
        tags=tags or "",
    )


@router.get("", response_model=ContentPage)
async def list_galleries(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    items, total = await GalleryService(db, storage).list_admin(page=page, limit=limit, search=search)
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get("/{gallery_id}", response_model=GalleryDetail)
async def get_gallery(
    gallery_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return await GalleryService(db, storage).get(gallery_id)


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_gallery(
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None, alias="isPublished"),
    tags: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    content_images: Optional[list[UploadFile]] = File(None, alias="contentImages"),
    content_image_temp_ids: Optional[list[str]] = Form(None, alias="contentImageTempIds"),
    gallery_images: Optional[list[UploadFile]] = File(None, alias="galleryImages"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    require_fields(title=title)
    data = _gallery_input(title, subtitle, description, caption, category, is_published, tags)
    uploads = await collect_uploads(
        thumbnail=thumbnail,
        content_images=content_images,
        content_image_temp_ids=content_image_temp_ids,
        gallery_images=gallery_images,
    )

    gallery_id, slug = await GalleryService(db, storage).create(data, author_id=admin.id, uploads=uploads)
    logger.info(f"Admin {admin.id} created gallery {gallery_id}")
    return {"success": True, "id": gallery_id, "slug": slug}


@router.put("/{gallery_id}", response_model=MutationResult)
async def update_gallery(
    gallery_id: int,
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None, alias="isPublished"),
    tags: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    content_images: Optional[list[UploadFile]] = File(None, alias="contentImages"),
    content_image_temp_ids: Optional[list[str]] = Form(None, alias="contentImageTempIds"),
    gallery_images: Optional[list[UploadFile]] = File(None, alias="galleryImages"),
    kept_image_urls: Optional[list[str]] = Form(None, alias="keptImageUrls"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    require_fields(title=title)
    data = _gallery_input(title, subtitle, description, caption, category, is_published, tags)
    uploads = await collect_uploads(
        thumbnail=thumbnail,
        content_images=content_images,
        content_image_temp_ids=content_image_temp_ids,
        gallery_images=gallery_images,
        kept_image_urls=kept_image_urls,
    )

    item = await GalleryService(db, storage).update(gallery_id, data, uploads=uploads)
    return {"success": True, "id": item.id, "slug": item.slug}


@router.delete("", response_model=BatchResult)
async def delete_galleries(
    payload: BatchDeleteRequest,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    # a failed id rolls the session back and expires `admin`
    admin_id = admin.id
    result = await GalleryService(db, storage).delete_many(payload.ids)
    logger.info(f"Admin {admin_id} deleted galleries {result['processed']}, failed {len(result['failed'])}")
    return result
