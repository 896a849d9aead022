"""
Profile, stats and friendship operations.
"""

from __future__ import annotations

import logging
from typing import List

from backend.repositories.challenges import ChallengeRepository
from backend.repositories.events import EventRepository
from backend.repositories.user_challenges import UserChallengeRepository
from backend.repositories.users import UserRepository
from shared.constants import CHALLENGE_CATEGORIES, TEST_CATEGORY
from shared.errors import ConflictError, NotFoundError, ValidationError
from shared.time_utils import to_datetime
from shared.types import Difficulty, EventStatus, User, UserChallengeStatus
from shared.validators import validate_user_schema

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "displayName",
    "email",
    "phoneNumber",
    "dateOfBirth",
    "location",
    "college",
    "profilePicture",
    "preferredCategories",
    "preferredDifficulty",
    "privacySettings",
)


def _validate_preferences(data: dict) -> None:
    errors = []
    allowed = CHALLENGE_CATEGORIES + [TEST_CATEGORY]
    categories = data.get("preferredCategories")
    if categories is not None and (
        not isinstance(categories, list) or any(c not in allowed for c in categories)
    ):
        errors.append(
            {
                "field": "preferredCategories",
                "message": f"Categories must be among: {', '.join(allowed)}",
            }
        )
    difficulty = data.get("preferredDifficulty")
    difficulties = [d.value for d in Difficulty]
    if difficulty is not None and difficulty not in difficulties:
        errors.append(
            {
                "field": "preferredDifficulty",
                "message": f"Difficulty must be one of: {', '.join(difficulties)}",
            }
        )
    if errors:
        raise ValidationError("User validation failed", errors)


class UserService:
    def __init__(
        self,
        users: UserRepository,
        user_challenges: UserChallengeRepository,
        challenges: ChallengeRepository,
        events: EventRepository,
    ):
        self.users = users
        self.user_challenges = user_challenges
        self.challenges = challenges
        self.events = events

    def get_profile(self, uid: str) -> User:
        return self.users.get(uid)

    def update_profile(self, uid: str, data: dict) -> User:
        """Applies the whitelisted profile fields after validation."""
        update = {key: data[key] for key in PROFILE_FIELDS if key in data}
        update = validate_user_schema(update, is_update=True)
        _validate_preferences(update)
        if update.get("dateOfBirth"):
            update["dateOfBirth"] = to_datetime(update["dateOfBirth"])
        return self.users.update(uid, update)

    def get_stats(self, uid: str) -> dict:
        user = self.users.get(uid)
        user_challenges = self.user_challenges.list_for_user(uid)
        completed = [
            uc for uc in user_challenges if uc.status == UserChallengeStatus.COMPLETED
        ]
        accepted = [
            uc for uc in user_challenges if uc.status == UserChallengeStatus.ACCEPTED
        ]
        joined = [e for e in self.events.list_events() if uid in (e.participants or [])]

        return {
            "user": {
                "uid": user.uid,
                "displayName": user.display_name,
                "points": user.points,
                "level": user.level,
                "currentStreak": user.current_streak,
                "longestStreak": user.longest_streak,
            },
            "challenges": {
                "total": len(user_challenges),
                "accepted": len(accepted),
                "completed": len(completed),
                "totalPointsEarned": sum(uc.points_earned or 0 for uc in completed),
            },
            "events": {
                "total": len(joined),
                "upcoming": sum(1 for e in joined if e.status == EventStatus.UPCOMING),
                "completed": sum(1 for e in joined if e.status == EventStatus.COMPLETED),
            },
            "achievements": {"badges": [], "totalBadges": 0},
        }

    def get_friends(self, uid: str) -> List[dict]:
        user = self.users.get(uid)
        if not user.friends:
            return []
        return [
            {
                "uid": friend.uid,
                "displayName": friend.display_name,
                "profilePicture": friend.profile_picture,
                "points": friend.points,
                "level": friend.level,
                "currentStreak": friend.current_streak,
            }
            for friend in self.users.get_many(user.friends)
        ]

    def send_friend_request(self, uid: str, friend_uid: str) -> None:
        if uid == friend_uid:
            raise ConflictError("Cannot send friend request to yourself")

        user = self.users.get(uid)
        friend = self.users.get(friend_uid)
        sent = user.friend_requests.get("sent") or []
        received = user.friend_requests.get("received") or []

        if friend_uid in (user.friends or []):
            raise ConflictError("Already friends with this user")
        if friend_uid in sent:
            raise ConflictError("Friend request already sent")
        if friend_uid in received:
            raise ConflictError("Friend request already received from this user")

        self.users.update(
            uid,
            {"friendRequests": {"sent": sent + [friend_uid], "received": received}},
        )
        self.users.update(
            friend_uid,
            {
                "friendRequests": {
                    "sent": friend.friend_requests.get("sent") or [],
                    "received": (friend.friend_requests.get("received") or []) + [uid],
                }
            },
        )
        logger.info("Friend request %s -> %s", uid, friend_uid)

    def accept_friend_request(self, uid: str, friend_uid: str) -> None:
        user = self.users.get(uid)
        friend = self.users.get(friend_uid)
        received = user.friend_requests.get("received") or []
        if friend_uid not in received:
            raise NotFoundError("Friend request")

        self.users.update(
            uid,
            {
                "friends": (user.friends or []) + [friend_uid],
                "friendRequests": {
                    "sent": user.friend_requests.get("sent") or [],
                    "received": [r for r in received if r != friend_uid],
                },
            },
        )
        self.users.update(
            friend_uid,
            {
                "friends": (friend.friends or []) + [uid],
                "friendRequests": {
                    "sent": [
                        s for s in friend.friend_requests.get("sent") or [] if s != uid
                    ],
                    "received": friend.friend_requests.get("received") or [],
                },
            },
        )

    def remove_friend(self, uid: str, friend_uid: str) -> None:
        user = self.users.get(uid)
        if friend_uid not in (user.friends or []):
            raise NotFoundError("Friend")

        self.users.update(uid, {"friends": [f for f in user.friends if f != friend_uid]})
        friend = self.users.get(friend_uid)
        self.users.update(
            friend_uid, {"friends": [f for f in friend.friends or [] if f != uid]}
        )

    def completion_history(self, uid: str) -> List[dict]:
        """Completed challenges joined with their challenge, newest first."""
        completed = self.user_challenges.list_for_user(
            uid, status=UserChallengeStatus.COMPLETED.value
        )
        completed.sort(
            key=lambda uc: to_datetime(uc.completed_at) or to_datetime(0), reverse=True
        )
        return [
            {
                "userChallenge": uc,
                "challenge": self.challenges.find(uc.challenge_id),
            }
            for uc in completed
        ]
