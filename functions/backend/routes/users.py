"""
Profile, stats, friends and streak endpoints for the signed-in user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.auth import CurrentUser
from backend.dependencies import get_current_user, get_streak_service, get_user_service
from backend.responses import success
from backend.schemas import FriendRequestPayload, ProfileUpdateRequest
from backend.services.streaks import StreakService
from backend.services.users import UserService

router = APIRouter()


@router.get("/profile")
def get_profile(
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return success(service.get_profile(user.uid))


@router.put("/profile")
def update_profile(
    payload: ProfileUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    updated = service.update_profile(user.uid, payload.to_document())
    return success(updated, message="Profile updated successfully")


@router.get("/stats")
def get_stats(
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return success(service.get_stats(user.uid))


@router.get("/friends")
def get_friends(
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return success(service.get_friends(user.uid))


@router.post("/friends/request")
def send_friend_request(
    payload: FriendRequestPayload,
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.send_friend_request(user.uid, payload.friend_uid)
    return success(message="Friend request sent successfully")


@router.post("/friends/accept/{friend_uid}")
def accept_friend_request(
    friend_uid: str,
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.accept_friend_request(user.uid, friend_uid)
    return success(message="Friend request accepted")


@router.delete("/friends/{friend_uid}")
def remove_friend(
    friend_uid: str,
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.remove_friend(user.uid, friend_uid)
    return success(message="Friend removed successfully")


@router.get("/completion-history")
def completion_history(
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return success(service.completion_history(user.uid))


@router.get("/streak")
def get_streak(
    user: CurrentUser = Depends(get_current_user),
    streaks: StreakService = Depends(get_streak_service),
):
    return success(streaks.get_streak_info(user.uid))
