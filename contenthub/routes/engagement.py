"""
Engagement Routes

Like and save toggles for classes and galleries.
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.auth import get_current_user
from contenthub.database import get_db
from contenthub.middleware.rate_limit import ENGAGEMENT_LIMIT, limiter
from contenthub.models.user import User
from contenthub.schemas.engagement import ClassEngagementResult, GalleryEngagementResult
from contenthub.services.engagement_service import EngagementService

router = APIRouter(prefix="/api", tags=["Engagement"])


@router.post("/classes/{class_id}/like", response_model=ClassEngagementResult)
@limiter.limit(ENGAGEMENT_LIMIT)
async def toggle_class_like(
    request: Request,
    response: Response,
    class_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await EngagementService(db).toggle_class_like(class_id, current_user)


@router.post("/classes/{class_id}/save", response_model=ClassEngagementResult)
@limiter.limit(ENGAGEMENT_LIMIT)
async def toggle_class_save(
    request: Request,
    response: Response,
    class_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await EngagementService(db).toggle_class_save(class_id, current_user)


@router.post("/galleries/{gallery_id}/like", response_model=GalleryEngagementResult)
@limiter.limit(ENGAGEMENT_LIMIT)
async def toggle_gallery_like(
    request: Request,
    response: Response,
    gallery_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await EngagementService(db).toggle_gallery_like(gallery_id, current_user)


@router.post("/galleries/{gallery_id}/save", response_model=GalleryEngagementResult)
@limiter.limit(ENGAGEMENT_LIMIT)
async def toggle_gallery_save(
    request: Request,
    response: Response,
    gallery_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await EngagementService(db).toggle_gallery_save(gallery_id, current_user)
