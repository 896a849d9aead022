"""
HTTP routes for the Sponta API, grouped by resource.
"""

from __future__ import annotations

from fastapi import APIRouter

from backend.routes import (
    auth,
    challenges,
    events,
    notifications,
    posts,
    storage,
    users,
)

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(challenges.router, prefix="/challenges", tags=["challenges"])
router.include_router(events.router, prefix="/events", tags=["events"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
router.include_router(storage.router, prefix="/storage", tags=["storage"])
