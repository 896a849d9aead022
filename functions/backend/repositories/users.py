"""
Data access for the users collection.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from backend.db import Increment
from backend.repositories.base import Repository
from shared.constants import (
    DEFAULT_STREAK_COUNT,
    DEFAULT_USER_LEVEL,
    DEFAULT_USER_POINTS,
    USERS_COLLECTION,
)
from shared.time_utils import to_datetime, utc_now
from shared.types import User


class UserRepository(Repository[User]):
    collection = USERS_COLLECTION
    model = User
    resource_name = "User"

    def create(self, uid: str, data: dict) -> User:
        """Creates the profile document with gamification and social defaults."""
        now = utc_now()
        doc = {
            "uid": uid,
            "phoneNumber": data.get("phoneNumber"),
            "email": data.get("email") or None,
            "displayName": data.get("displayName") or "",
            "dateOfBirth": to_datetime(data.get("dateOfBirth")),
            "location": data.get("location") or None,
            "college": data.get("college") or {"name": "", "verified": False},
            "profilePicture": data.get("profilePicture") or None,
            "points": DEFAULT_USER_POINTS,
            "level": DEFAULT_USER_LEVEL,
            "currentStreak": DEFAULT_STREAK_COUNT,
            "longestStreak": DEFAULT_STREAK_COUNT,
            "lastActivityDate": None,
            "friends": [],
            "friendRequests": {"sent": [], "received": []},
            "privacySettings": {
                "showOnLeaderboard": True,
                "allowFriendRequests": True,
                "showLocation": True,
            },
            "preferredCategories": data.get("preferredCategories") or [],
            "preferredDifficulty": data.get("preferredDifficulty"),
            "createdAt": now,
            "updatedAt": now,
        }
        self.store.set(self.collection, uid, doc)
        return self._load(uid, doc)

    def get_by_phone(self, phone_number: Optional[str]) -> Optional[User]:
        if not phone_number:
            return None
        records = self.store.query(
            self.collection, [("phoneNumber", "==", phone_number)], limit=1
        )
        return self._load(*records[0]) if records else None

    def get_many(self, uids: Sequence[str]) -> List[User]:
        return self._load_all(self.store.get_many(self.collection, list(uids)))

    def list_all(self) -> List[User]:
        return self._load_all(self.store.query(self.collection))

    def add_points(self, uid: str, points: int) -> User:
        return self.update(uid, {"points": Increment(points)})

    def update_streak(
        self,
        uid: str,
        current_streak: int,
        longest_streak: int,
        last_activity_date: Any,
    ) -> User:
        return self.update(
            uid,
            {
                "currentStreak": current_streak,
                "longestStreak": longest_streak,
                "lastActivityDate": last_activity_date,
            },
        )
