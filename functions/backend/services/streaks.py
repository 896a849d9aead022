"""
Daily streak bookkeeping.

A day counts towards the streak when the user has at least one verified,
completed challenge on that (UTC) calendar day.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from backend.repositories.user_challenges import UserChallengeRepository
from backend.repositories.users import UserRepository
from backend.services.notifications import NotificationService
from shared.api import StreakInfo, StreakUpdate
from shared.time_utils import to_date, utc_now
from shared.types import UserChallengeStatus

logger = logging.getLogger(__name__)


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time(), tzinfo=timezone.utc)


class StreakService:
    def __init__(
        self,
        users: UserRepository,
        user_challenges: UserChallengeRepository,
        notifications: NotificationService,
    ):
        self.users = users
        self.user_challenges = user_challenges
        self.notifications = notifications

    def _completion_days(self, user_id: str) -> set[date]:
        completed = self.user_challenges.list_for_user(
            user_id, status=UserChallengeStatus.COMPLETED.value
        )
        return {
            to_date(uc.completed_at)
            for uc in completed
            if uc.verified and uc.completed_at
        }

    def update_streak(self, user_id: str, today: Optional[date] = None) -> StreakUpdate:
        """Recomputes the user's streak after a completion attempt."""
        today = today or utc_now().date()
        yesterday = today - timedelta(days=1)
        user = self.users.get(user_id)

        days = self._completion_days(user_id)
        completed_today = today in days
        completed_yesterday = yesterday in days

        previous = user.current_streak or 0
        previous_longest = user.longest_streak or 0
        current = previous
        last_activity = to_date(user.last_activity_date)

        if completed_today:
            if last_activity == today and current > 0:
                # Today was already counted by an earlier completion.
                pass
            elif completed_yesterday:
                current += 1
            else:
                current = 1
            last_activity = today
        elif not completed_yesterday and current > 0:
            current = 0

        longest = max(previous_longest, current)
        last_activity_value = _start_of_day(last_activity) if last_activity else None
        self.users.update_streak(user_id, current, longest, last_activity_value)

        if completed_today and current > previous:
            try:
                self.notifications.check_streak_notifications(
                    user_id, current, previous_longest
                )
            except Exception:
                logger.exception("Failed to send streak notification to %s", user_id)

        return StreakUpdate(
            current_streak=current,
            longest_streak=longest,
            last_activity_date=last_activity_value,
            completed_today=completed_today,
        )

    def get_streak_info(self, user_id: str, today: Optional[date] = None) -> StreakInfo:
        today = today or utc_now().date()
        user = self.users.get(user_id)
        return StreakInfo(
            current_streak=user.current_streak or 0,
            longest_streak=user.longest_streak or 0,
            last_activity_date=user.last_activity_date,
            is_active_today=to_date(user.last_activity_date) == today,
        )

    def run_daily_streak_maintenance(self, today: Optional[date] = None) -> dict:
        """
        Resets lapsed streaks and reminds users whose streak is at risk.

        A streak whose last active day is before yesterday is over. A streak
        last extended yesterday survives only if the user completes a
        challenge today, so those users get a reminder.
        """
        today = today or utc_now().date()
        yesterday = today - timedelta(days=1)
        reset = reminded = 0

        for user in self.users.list_all():
            streak = user.current_streak or 0
            if streak <= 0:
                continue
            last_activity = to_date(user.last_activity_date)
            if last_activity is None or last_activity < yesterday:
                self.users.update_streak(
                    user.uid, 0, user.longest_streak or 0, user.last_activity_date
                )
                self._notify(self.notifications.send_streak_broken, user.uid, streak)
                reset += 1
            elif last_activity == yesterday:
                self._notify(self.notifications.send_streak_reminder, user.uid)
                reminded += 1

        logger.info("Streak maintenance: %d reset, %d reminded", reset, reminded)
        return {"reset": reset, "reminded": reminded}

    def _notify(self, send, *args) -> None:
        try:
            send(*args)
        except Exception:
            logger.exception("Failed to send streak notification to %s", args[0])
