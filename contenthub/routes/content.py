"""
Public Content Routes

Listing and detail pages for published classes, galleries and news.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.auth import get_optional_user
from contenthub.database import get_db
from contenthub.models.user import User
from contenthub.schemas.content import ClassDetail, ContentPage, GalleryDetail, NewsDetail
from contenthub.services.content_service import ClassService, GalleryService, NewsService
from contenthub.utils.storage import ObjectStorage, get_storage

router = APIRouter(prefix="/api", tags=["Content"])


# ============== Classes ==============


@router.get("/classes", response_model=ContentPage)
async def list_classes(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None, description="Tag slug"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    items, total = await ClassService(db, storage).list_published(page=page, limit=limit, category=category, tag=tag)
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get("/classes/{slug}", response_model=ClassDetail)
async def get_class(
    slug: str,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return await ClassService(db, storage).get_by_slug(slug, viewer=viewer)


# ============== Galleries ==============


@router.get("/galleries", response_model=ContentPage)
async def list_galleries(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None, description="Tag slug"),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    items, total = await GalleryService(db, storage).list_published(page=page, limit=limit, category=category, tag=tag)
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get("/galleries/{slug}", response_model=GalleryDetail)
async def get_gallery(
    slug: str,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return await GalleryService(db, storage).get_by_slug(slug, viewer=viewer)


# ============== News ==============


@router.get("/news", response_model=ContentPage)
async def list_news(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    items, total = await NewsService(db, storage).list_published(page=page, limit=limit, category=category)
    return {"items": items, "total": total, "page": page, "limit": limit}


@router.get("/news/{slug}", response_model=NewsDetail)
async def get_news(
    slug: str,
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return await NewsService(db, storage).get_by_slug(slug, viewer=viewer)
