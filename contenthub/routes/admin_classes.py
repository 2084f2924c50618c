"""
Admin Class Routes

Back-office endpoints for classes. Every route answers 404 to callers who
are not admins.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.auth import require_admin
from contenthub.constants import CLASS_DEFAULT_CATEGORY
from contenthub.database import get_db
from contenthub.models.user import User
from contenthub.schemas.content import (
    BatchDeleteRequest,
    BatchResult,
    ClassDetail,
    ClassInput,
    ContentPage,
    MutationResult,
)
from contenthub.services.content_service import ClassService
from contenthub.utils.forms import collect_uploads, form_flag, require_fields
from contenthub.utils.storage import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/classes", tags=["Admin Classes"])


@router.get("", response_model=ContentPage)
async def list_classes(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    items, total = await ClassService(db, storage).list_admin(page=page, limit=limit, search=search)
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get("/{class_id}", response_model=ClassDetail)
async def get_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return await ClassService(db, storage).get(class_id)


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_class(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None, alias="isPublished"),
    tags: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    content_images: Optional[list[UploadFile]] = File(None, alias="contentImages"),
    content_image_temp_ids: Optional[list[str]] = Form(None, alias="contentImageTempIds"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    require_fields(title=title, content=content)
    data = ClassInput(
        title=title,
        description=description,
        category=category or CLASS_DEFAULT_CATEGORY,
        content=content,
        is_published=form_flag(is_published),
        tags=tags or "",
    )
    uploads = await collect_uploads(
        thumbnail=thumbnail,
        content_images=content_images,
        content_image_temp_ids=content_image_temp_ids,
    )

    class_id, slug = await ClassService(db, storage).create(data, author_id=admin.id, uploads=uploads)
    logger.info(f"Admin {admin.id} created class {class_id}")
    return {"success": True, "id": class_id, "slug": slug}


@router.put("/{class_id}", response_model=MutationResult)
async def update_class(
    class_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    is_published: Optional[str] = Form(None, alias="isPublished"),
    tags: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    content_images: Optional[list[UploadFile]] = File(None, alias="contentImages"),
    content_image_temp_ids: Optional[list[str]] = Form(None, alias="contentImageTempIds"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    require_fields(title=title, content=content)
    data = ClassInput(
        title=title,
        description=description,
        category=category or CLASS_DEFAULT_CATEGORY,
        content=content,
        is_published=form_flag(is_published),
        tags=tags or "",
    )
    uploads = await collect_uploads(
        thumbnail=thumbnail,
        content_images=content_images,
        content_image_temp_ids=content_image_temp_ids,
    )

    item = await ClassService(db, storage).update(class_id, data, uploads=uploads)
    return {"success": True, "id": item.id, "slug": item.slug}


@router.delete("", response_model=BatchResult)
async def delete_classes(
    payload: BatchDeleteRequest,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    # a failed id rolls the session back and expires `admin`
    admin_id = admin.id
    result = await ClassService(db, storage).delete_many(payload.ids)
    logger.info(f"Admin {admin_id} deleted classes {result['processed']}, failed {len(result['failed'])}")
    return result
