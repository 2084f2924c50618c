"""
Comment Routes

Class comments, comment likes and moderation.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.auth import get_current_user, require_admin
from contenthub.database import get_db
from contenthub.middleware.rate_limit import COMMENT_CREATE_LIMIT, ENGAGEMENT_LIMIT, limiter
from contenthub.models.user import User
from contenthub.schemas.comment import (
    AdminCommentsPage,
    BulkVisibilityRequest,
    CommentCreate,
    CommentLikeResult,
    CommentOut,
    CommentsPage,
    CommentUpdate,
    CommentVisibilityResult,
)
from contenthub.schemas.content import BatchResult
from contenthub.services.comment_service import SORT_LATEST, CommentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Comments"])


@router.get("/class/comments", response_model=CommentsPage)
async def get_class_comments(
    class_id: int = Query(..., alias="classId"),
    offset: int = Query(0),
    limit: Optional[int] = Query(None),
    sort_order: str = Query(SORT_LATEST, alias="sortOrder"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Page through a class's top-level comments; replies of the page follow
    them. ``totalTopLevel`` counts top-level comments only.
    """
    service = CommentService(db)
    return await service.get_comments_page(
        class_id, viewer=current_user, offset=offset, limit=limit, sort_order=sort_order
    )


@router.post("/classes/{class_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(COMMENT_CREATE_LIMIT)
async def create_comment(
    request: Request,
    response: Response,
    class_id: int,
    payload: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = CommentService(db)
    return await service.create_comment(class_id, current_user, payload.content, parent_id=payload.parent_id)


@router.patch("/comments/{comment_id}", response_model=CommentOut)
async def update_comment(
    comment_id: int,
    payload: CommentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CommentService(db).update_comment(comment_id, current_user, payload.content)


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    removed = await CommentService(db).delete_comment(comment_id, current_user)
    return {"success": True, "deleted_count": removed}


@router.post("/comments/{comment_id}/like", response_model=CommentLikeResult)
@limiter.limit(ENGAGEMENT_LIMIT)
async def toggle_comment_like(
    request: Request,
    response: Response,
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CommentService(db).toggle_comment_like(comment_id, current_user)


# ============== Moderation ==============


@router.post("/comments/{comment_id}/visibility", response_model=CommentVisibilityResult)
async def toggle_comment_visibility(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await CommentService(db).toggle_visibility(comment_id, admin)


@router.post("/admin/comments/visibility", response_model=BatchResult)
async def set_comments_visibility(
    payload: BulkVisibilityRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await CommentService(db).set_visibility_bulk(payload.ids, payload.is_visible, admin)


@router.get("/admin/comments", response_model=AdminCommentsPage)
async def list_admin_comments(
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    class_id: Optional[int] = Query(None, alias="classId"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """All comments for the moderation table, hidden ones included."""
    return await CommentService(db).list_admin_comments(admin, page=page, limit=limit, class_id=class_id)
