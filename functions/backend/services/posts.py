"""
Community posts and likes.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from backend.repositories.posts import PostRepository
from backend.repositories.users import UserRepository
from shared.constants import DEFAULT_POSTS_LIMIT
from shared.errors import BadRequestError, ForbiddenError
from shared.types import Post, User
from shared.validators import sanitize_string

logger = logging.getLogger(__name__)


def display_username(user: User) -> str:
    if user.display_name:
        return user.display_name
    if user.email:
        return user.email.split("@")[0]
    return "user"


class PostService:
    def __init__(self, posts: PostRepository, users: UserRepository):
        self.posts = posts
        self.users = users

    def list_posts(self, limit: int = DEFAULT_POSTS_LIMIT) -> List[Post]:
        return self.posts.list_recent(limit or DEFAULT_POSTS_LIMIT)

    def get(self, post_id: str) -> Post:
        return self.posts.get(post_id)

    def list_by_user(self, user_id: str) -> List[Post]:
        return self.posts.list_by_user(user_id)

    def create(
        self,
        user_id: str,
        caption: Optional[str] = None,
        image_url: Optional[str] = None,
        is_sponsored: bool = False,
    ) -> Post:
        if not caption and not image_url:
            raise BadRequestError("Post must have either a caption or an image")

        user = self.users.get(user_id)
        post = self.posts.create(
            user_id,
            display_username(user),
            caption=sanitize_string(caption or ""),
            image_url=image_url,
            user_image=user.profile_picture,
            is_sponsored=is_sponsored,
        )
        logger.info("Post %s created by %s", post.id, user_id)
        return post

    def _owned(self, user_id: str, post_id: str, action: str) -> Post:
        post = self.posts.get(post_id)
        if post.user_id != user_id:
            raise ForbiddenError(f"You can only {action} your own posts")
        return post

    def update(
        self,
        user_id: str,
        post_id: str,
        caption: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Post:
        self._owned(user_id, post_id, "update")
        data = {}
        if caption is not None:
            data["caption"] = sanitize_string(caption)
        if image_url is not None:
            data["imageUrl"] = image_url
        return self.posts.update(post_id, data)

    def delete(self, user_id: str, post_id: str) -> None:
        self._owned(user_id, post_id, "delete")
        self.posts.delete(post_id)

    def toggle_like(self, user_id: str, post_id: str) -> Post:
        return self.posts.toggle_like(post_id, user_id)
