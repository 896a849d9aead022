"""
Data access for the communityPosts collection.
"""

from __future__ import annotations

from typing import List, Optional

from backend.db import ArrayRemove, ArrayUnion, Increment
from backend.repositories.base import Repository
from shared.constants import DEFAULT_POSTS_LIMIT, POSTS_COLLECTION
from shared.time_utils import utc_now
from shared.types import Post


class PostRepository(Repository[Post]):
    collection = POSTS_COLLECTION
    model = Post
    resource_name = "Post"

    def _load(self, doc_id: str, data: dict) -> Post:
        post = super()._load(doc_id, data)
        # Clients sort and display by "timestamp", which mirrors createdAt.
        post.timestamp = post.created_at or utc_now()
        return post

    def create(
        self,
        user_id: str,
        username: str,
        caption: str = "",
        image_url: Optional[str] = None,
        user_image: Optional[str] = None,
        is_sponsored: bool = False,
    ) -> Post:
        now = utc_now()
        doc = {
            "userId": user_id,
            "username": username,
            "userImage": user_image or None,
            "imageUrl": image_url or None,
            "caption": caption or "",
            "likes": 0,
            "likedBy": [],
            "isSponsored": bool(is_sponsored),
            "createdAt": now,
            "updatedAt": now,
        }
        doc_id = self.store.add(self.collection, doc)
        return self._load(doc_id, doc)

    def list_recent(self, limit: int = DEFAULT_POSTS_LIMIT) -> List[Post]:
        records = self.store.query(
            self.collection, order_by="createdAt", descending=True, limit=limit
        )
        return self._load_all(records)

    def list_by_user(self, user_id: str) -> List[Post]:
        records = self.store.query(
            self.collection,
            [("userId", "==", user_id)],
            order_by="createdAt",
            descending=True,
        )
        return self._load_all(records)

    def toggle_like(self, post_id: str, user_id: str) -> Post:
        post = self.get(post_id)
        if user_id in post.liked_by:
            change = {"likedBy": ArrayRemove([user_id]), "likes": Increment(-1)}
        else:
            change = {"likedBy": ArrayUnion([user_id]), "likes": Increment(1)}
        return self.update(post_id, change)
