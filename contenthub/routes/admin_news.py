"""
Admin News Routes
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.auth import require_admin
from contenthub.constants import NEWS_DEFAULT_CATEGORY
from contenthub.database import get_db
from contenthub.models.content import NewsVisibility
from contenthub.models.user import User
from contenthub.schemas.content import (
    BatchDeleteRequest,
    BatchResult,
    ContentPage,
    MutationResult,
    NewsDetail,
    NewsInput,
)
from contenthub.services.content_service import NewsService
from contenthub.utils.forms import collect_uploads, form_flag, require_fields
from contenthub.utils.storage import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/news", tags=["Admin News"])


def _news_input(title, category, content, is_published, visibility) -> NewsInput:
    return NewsInput(
        title=title,
        category=category or NEWS_DEFAULT_CATEGORY,
        content=content,
        is_published=form_flag(is_published),
        # anything but "member" is public
        visibility=NewsVisibility.MEMBER if (visibility or "").strip() == "member" else NewsVisibility.PUBLIC,
    )


@router.get("", response_model=ContentPage)
async def list_news(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    items, total = await NewsService(db, storage).list_admin(page=page, limit=limit, search=search)
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get("/{news_id}", response_model=NewsDetail)
async def get_news(
    news_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return await NewsService(db, storage).get(news_id)


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_news(
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None, alias="isPublished"),
    visibility: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    cover: Optional[UploadFile] = File(None),
    content_images: Optional[list[UploadFile]] = File(None, alias="contentImages"),
    content_image_temp_ids: Optional[list[str]] = Form(None, alias="contentImageTempIds"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    require_fields(title=title, content=content)
    data = _news_input(title, category, content, is_published, visibility)
    uploads = await collect_uploads(
        thumbnail=thumbnail,
        cover=cover,
        content_images=content_images,
        content_image_temp_ids=content_image_temp_ids,
    )

    news_id, slug = await NewsService(db, storage).create(data, author_id=admin.id, uploads=uploads)
    logger.info(f"Admin {admin.id} created news {news_id}")
    return {"success": True, "id": news_id, "slug": slug}


@router.put("/{news_id}", response_model=MutationResult)
async def update_news(
    news_id: int,
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None, alias="isPublished"),
    visibility: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    cover: Optional[UploadFile] = File(None),
    content_images: Optional[list[UploadFile]] = File(None, alias="contentImages"),
    content_image_temp_ids: Optional[list[str]] = Form(None, alias="contentImageTempIds"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    require_fields(title=title, content=content)
    data = _news_input(title, category, content, is_published, visibility)
    uploads = await collect_uploads(
        thumbnail=thumbnail,
        cover=cover,
        content_images=content_images,
        content_image_temp_ids=content_image_temp_ids,
    )

    item = await NewsService(db, storage).update(news_id, data, uploads=uploads)
    return {"success": True, "id": item.id, "slug": item.slug}


@router.delete("", response_model=BatchResult)
async def delete_news(
    payload: BatchDeleteRequest,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    # a failed id rolls the session back and expires `admin`
    admin_id = admin.id
    result = await NewsService(db, storage).delete_many(payload.ids)
    logger.info(f"Admin {admin_id} deleted news {result['processed']}, failed {len(result['failed'])}")
    return result
