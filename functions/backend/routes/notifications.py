"""
Notification inbox endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from backend.auth import CurrentUser
from backend.dependencies import get_current_user, get_notification_service
from backend.responses import success
from backend.services.notifications import NotificationService
from shared.constants import DEFAULT_NOTIFICATIONS_LIMIT

router = APIRouter()


@router.get("")
def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    limit: int = Query(default=DEFAULT_NOTIFICATIONS_LIMIT, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notifications = service.list_for_user(
        user.uid, unread_only=unread_only, limit=limit
    )
    return success(notifications)


@router.get("/unread/count")
def unread_count(
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return success({"count": service.unread_count(user.uid)})


@router.put("/read-all")
def mark_all_read(
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    count = service.mark_all_read(user.uid)
    return success({"count": count}, message=f"Marked {count} notifications as read")


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    service.mark_read(user.uid, notification_id)
    return success(message="Notification marked as read")


@router.delete("/read")
def delete_read(
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    count = service.delete_read(user.uid)
    return success({"count": count}, message=f"Deleted {count} read notifications")


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    service.delete(user.uid, notification_id)
    return success(message="Notification deleted")


@router.post("/streak-reminder")
def streak_reminder(
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.send_streak_reminder(user.uid)
    return success(notification, message="Streak reminder sent")
