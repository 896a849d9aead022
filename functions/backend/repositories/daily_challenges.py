"""
Cache of each user's daily challenge, keyed by user and calendar day.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from backend.db import DocumentStore
from shared.constants import DAILY_CHALLENGES_COLLECTION
from shared.time_utils import utc_now


def daily_key(user_id: str, day: date) -> str:
    return f"{user_id}_{day.isoformat()}"


class DailyChallengeRepository:
    """Per-user, per-calendar-day pointer to the generated challenge."""

    collection = DAILY_CHALLENGES_COLLECTION

    def __init__(self, store: DocumentStore):
        self.store = store

    def get(self, user_id: str, day: date) -> Optional[dict]:
        return self.store.get(self.collection, daily_key(user_id, day))

    def set(
        self,
        user_id: str,
        day: date,
        challenge_id: str,
        timezone_name: str,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> dict:
        doc = {
            "userId": user_id,
            "date": day.isoformat(),
            "challengeId": challenge_id,
            "timezone": timezone_name,
            "category": category,
            "difficulty": difficulty,
            "createdAt": utc_now(),
        }
        self.store.set(self.collection, daily_key(user_id, day), doc)
        return doc
