from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ecotrack.core.auth import get_current_user_id
from ecotrack.core.config import settings
from ecotrack.features.community.models import CommentCreate, PostCreate
from ecotrack.features.moderation.moderator import moderation_report
from ecotrack.services import AppServices, get_services

router = APIRouter()


class ModerateRequest(BaseModel):
    content: str = Field(..., min_length=1)


@router.get("/v1/community/posts")
def list_posts(
    limit: Optional[int] = Query(None, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    posts = services.community.list_posts(limit=limit or settings.COMMUNITY_PAGE_SIZE, viewer_id=user_id)
    return {"posts": [p.model_dump(mode="json") for p in posts]}


@router.post("/v1/community/posts", status_code=201)
def create_post(
    req: PostCreate,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    """Create a post. Rejected content returns 422 content_rejected."""
    submission = services.community.create_post(user_id=user_id, title=req.title, content=req.content)
    return submission.model_dump(mode="json", exclude_none=True)


@router.post("/v1/community/posts/{post_id}/comments", status_code=201)
def add_comment(
    post_id: str,
    req: CommentCreate,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    submission = services.community.add_comment(user_id=user_id, post_id=post_id, content=req.content)
    return submission.model_dump(mode="json", exclude_none=True)


@router.post("/v1/community/posts/{post_id}/like")
def toggle_like(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return services.community.toggle_like(user_id=user_id, post_id=post_id).model_dump(mode="json")


@router.post("/v1/community/moderate")
def moderate_preview(
    req: ModerateRequest,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    """Verdict the caller's text would get, without posting it."""
    result = services.community.review(req.content)
    return moderation_report(req.content, result).model_dump(mode="json")
