"""
Community post feed endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.auth import CurrentUser
from backend.dependencies import get_current_user, get_optional_user, get_post_service
from backend.responses import success
from backend.schemas import PostCreateRequest, PostUpdateRequest
from backend.services.posts import PostService
from shared.constants import DEFAULT_POSTS_LIMIT

router = APIRouter()


@router.get("")
def list_posts(
    limit: int = Query(default=DEFAULT_POSTS_LIMIT, ge=1, le=100),
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
):
    return success(service.list_posts(limit))


@router.get("/user/{user_id}")
def posts_by_user(
    user_id: str,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
):
    return success(service.list_by_user(user_id))


@router.get("/{post_id}")
def get_post(
    post_id: str,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
):
    return success(service.get(post_id))


@router.post("", status_code=201)
def create_post(
    payload: PostCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    post = service.create(
        user.uid,
        caption=payload.caption,
        image_url=payload.image_url,
        is_sponsored=payload.is_sponsored,
    )
    return success(post)


@router.put("/{post_id}")
def update_post(
    post_id: str,
    payload: PostUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    post = service.update(
        user.uid, post_id, caption=payload.caption, image_url=payload.image_url
    )
    return success(post)


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    service.delete(user.uid, post_id)
    return success(message="Post deleted successfully")


@router.post("/{post_id}/like")
def toggle_like(
    post_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    return success(service.toggle_like(user.uid, post_id))
