"""
Data access for the events collection.
"""

from __future__ import annotations

from typing import List, Optional

from backend.db import ArrayRemove, ArrayUnion
from backend.repositories.base import Repository
from shared.constants import DEFAULT_NEARBY_RADIUS_METERS, EVENTS_COLLECTION
from shared.geo_utils import filter_nearby
from shared.time_utils import to_datetime, utc_now
from shared.types import Event, EventStatus

TIME_FIELDS = ("startTime", "endTime")


def _parse_times(doc: dict) -> dict:
    for key in TIME_FIELDS:
        if isinstance(doc.get(key), str):
            doc[key] = to_datetime(doc[key])
    return doc


class EventRepository(Repository[Event]):
    collection = EVENTS_COLLECTION
    model = Event
    resource_name = "Event"

    def create(self, data: dict) -> Event:
        now = utc_now()
        creator = data.get("createdBy") or data.get("userId")
        doc = {
            **data,
            "createdBy": creator,
            "userId": creator,
            "participants": data.get("participants") or [],
            "status": data.get("status") or EventStatus.UPCOMING.value,
            "isPublic": data.get("isPublic", True),
            "tags": data.get("tags") or [],
            "createdAt": now,
            "updatedAt": now,
        }
        doc.pop("id", None)
        _parse_times(doc)
        doc_id = self.store.add(self.collection, doc)
        return self._load(doc_id, doc)

    def list_events(
        self,
        status: Optional[str] = None,
        is_public: Optional[bool] = None,
        category: Optional[str] = None,
    ) -> List[Event]:
        """Lists events matching the filters, soonest first."""
        filters = []
        if status:
            filters.append(("status", "==", status))
        if is_public is not None:
            filters.append(("isPublic", "==", is_public))
        if category:
            filters.append(("category", "==", category))
        records = self.store.query(self.collection, filters, order_by="startTime")
        return self._load_all(records)

    def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
    ) -> List[Event]:
        candidates = self.list_events(status=EventStatus.UPCOMING.value, is_public=True)
        matches = filter_nearby(
            candidates, latitude, longitude, radius_meters, lambda e: e.location
        )
        result = []
        for event, distance in matches:
            event.distance = distance
            result.append(event)
        return result

    def update(self, doc_id: str, data: dict) -> Event:
        return super().update(doc_id, _parse_times(dict(data)))

    def add_participant(self, event_id: str, user_id: str) -> Event:
        return self.update(event_id, {"participants": ArrayUnion([user_id])})

    def remove_participant(self, event_id: str, user_id: str) -> Event:
        return self.update(event_id, {"participants": ArrayRemove([user_id])})
