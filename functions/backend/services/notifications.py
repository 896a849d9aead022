"""
In-app notifications: streak messages plus the per-user inbox operations.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from backend.repositories.notifications import NotificationRepository
from backend.repositories.users import UserRepository
from shared.errors import NotFoundError
from shared.types import Notification, NotificationType

logger = logging.getLogger(__name__)

STREAK_MILESTONES = (7, 30)


def streak_milestone_message(streak_count: int) -> tuple[str, str]:
    """Returns the (title, body) pair for a streak of the given length."""
    if streak_count == 7:
        return (
            "🔥 7 Day Streak!",
            f"Amazing! You've maintained a {streak_count}-day streak. Keep it going!",
        )
    if streak_count == 30:
        return (
            "🔥🔥 30 Day Streak!",
            f"Incredible! You've reached a {streak_count}-day streak milestone!",
        )
    if streak_count % 7 == 0:
        return (
            f"🔥 {streak_count} Day Streak!",
            f"Congratulations on your {streak_count}-day streak!",
        )
    return (
        "🔥 Streak Update",
        f"You're on a {streak_count}-day streak! Keep it up!",
    )


def is_streak_milestone(streak_count: int) -> bool:
    return streak_count > 0 and (
        streak_count in STREAK_MILESTONES or streak_count % 7 == 0
    )


class NotificationService:
    def __init__(self, notifications: NotificationRepository, users: UserRepository):
        self.notifications = notifications
        self.users = users

    def send_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        body: str,
        data: Optional[dict] = None,
        priority: str = "normal",
    ) -> Notification:
        # Stored only; push delivery is handled by the client polling the inbox.
        notification = self.notifications.create(
            user_id, type, title, body, data=data, priority=priority
        )
        logger.info("Notification %s (%s) stored for %s", notification.id, type, user_id)
        return notification

    def send_streak_milestone(self, user_id: str, streak_count: int) -> Notification:
        title, body = streak_milestone_message(streak_count)
        return self.send_notification(
            user_id,
            NotificationType.STREAK_MILESTONE.value,
            title,
            body,
            data={"streakCount": streak_count, "type": "streak_milestone"},
            priority="high",
        )

    def send_streak_reminder(self, user_id: str) -> Notification:
        user = self.users.get(user_id)
        current = user.current_streak or 0
        return self.send_notification(
            user_id,
            NotificationType.STREAK_REMINDER.value,
            "⏰ Don't Break Your Streak!",
            f"You're on a {current}-day streak! "
            "Complete a challenge today to keep it going.",
            data={"currentStreak": current, "type": "streak_reminder"},
            priority="high",
        )

    def send_streak_broken(self, user_id: str, previous_streak: int) -> Notification:
        return self.send_notification(
            user_id,
            NotificationType.STREAK_BROKEN.value,
            "💔 Streak Broken",
            f"Your {previous_streak}-day streak has ended. Start a new one today!",
            data={"previousStreak": previous_streak, "type": "streak_broken"},
        )

    def check_streak_notifications(
        self, user_id: str, current_streak: int, previous_longest: int
    ) -> Optional[Notification]:
        """
        Sends at most one streak notification after the streak grew.

        Milestones (7, 30 and every 7th day) win; otherwise a "Streak Update"
        is sent only when the streak beats the user's previous record.
        """
        if is_streak_milestone(current_streak) or current_streak > previous_longest:
            return self.send_streak_milestone(user_id, current_streak)
        return None

    def _owned(self, user_id: str, notification_id: str) -> Notification:
        notification = self.notifications.get(notification_id)
        if notification.user_id != user_id:
            raise NotFoundError("Notification")
        return notification

    def list_for_user(
        self, user_id: str, unread_only: bool = False, limit: Optional[int] = None
    ) -> List[Notification]:
        return self.notifications.list_for_user(
            user_id, unread_only=unread_only, limit=limit
        )

    def unread_count(self, user_id: str) -> int:
        return self.notifications.unread_count(user_id)

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        self._owned(user_id, notification_id)
        return self.notifications.mark_read(notification_id)

    def mark_all_read(self, user_id: str) -> int:
        return self.notifications.mark_all_read(user_id)

    def delete(self, user_id: str, notification_id: str) -> None:
        self._owned(user_id, notification_id)
        self.notifications.delete(notification_id)

    def delete_read(self, user_id: str) -> int:
        return self.notifications.delete_read(user_id)
