"""
Data access for the challenges collection.
"""

from __future__ import annotations

from typing import List, Optional

from backend.db import Increment
from backend.repositories.base import Repository
from shared.constants import CHALLENGES_COLLECTION, DEFAULT_NEARBY_RADIUS_METERS
from shared.geo_utils import filter_nearby
from shared.time_utils import to_datetime, utc_now
from shared.types import Challenge


class ChallengeRepository(Repository[Challenge]):
    collection = CHALLENGES_COLLECTION
    model = Challenge
    resource_name = "Challenge"

    def create(self, data: dict) -> Challenge:
        now = utc_now()
        doc = {
            **data,
            "isActive": data.get("isActive", True),
            "isFeatured": data.get("isFeatured") or False,
            "totalCompletions": 0,
            "totalAccepts": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        for key in ("startDate", "endDate"):
            if isinstance(doc.get(key), str):
                doc[key] = to_datetime(doc[key])
        doc.pop("id", None)
        doc_id = self.store.add(self.collection, doc)
        return self._load(doc_id, doc)

    def list_active(
        self, category: Optional[str] = None, difficulty: Optional[str] = None
    ) -> List[Challenge]:
        filters = [("isActive", "==", True)]
        if category:
            filters.append(("category", "==", category))
        if difficulty:
            filters.append(("difficulty", "==", difficulty))
        return self._load_all(self.store.query(self.collection, filters))

    def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
    ) -> List[Challenge]:
        matches = filter_nearby(
            self.list_active(), latitude, longitude, radius_meters, lambda c: c.location
        )
        result = []
        for challenge, distance in matches:
            challenge.distance = distance
            result.append(challenge)
        return result

    def increment_accepts(self, challenge_id: str) -> None:
        self.update(challenge_id, {"totalAccepts": Increment(1)})

    def increment_completions(self, challenge_id: str) -> None:
        self.update(challenge_id, {"totalCompletions": Increment(1)})
