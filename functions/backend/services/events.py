"""
Event creation, updates and participant membership.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from backend.repositories.events import EventRepository
from shared.constants import DEFAULT_NEARBY_RADIUS_METERS
from shared.errors import ConflictError, ForbiddenError
from shared.types import Event
from shared.validators import validate_event_schema

logger = logging.getLogger(__name__)

# Fields the creator cannot change through an update.
PROTECTED_FIELDS = ("id", "createdBy", "userId", "participants", "createdAt")


class EventService:
    def __init__(self, events: EventRepository):
        self.events = events

    def create(self, user_id: str, payload: dict) -> Event:
        data = validate_event_schema(payload)
        event = self.events.create({**data, "createdBy": user_id})
        logger.info("User %s created event %s", user_id, event.id)
        return event

    def list_events(
        self,
        status: Optional[str] = None,
        is_public: Optional[bool] = None,
        category: Optional[str] = None,
    ) -> List[Event]:
        return self.events.list_events(
            status=status, is_public=is_public, category=category
        )

    def get(self, event_id: str) -> Event:
        return self.events.get(event_id)

    def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
    ) -> List[Event]:
        return self.events.nearby(latitude, longitude, radius_meters)

    def update(self, user_id: str, event_id: str, payload: dict) -> Event:
        event = self.events.get(event_id)
        if event.created_by != user_id:
            raise ForbiddenError("You can only update your own events")
        data = validate_event_schema(payload, is_update=True)
        for key in PROTECTED_FIELDS:
            data.pop(key, None)
        return self.events.update(event_id, data)

    def join(self, user_id: str, event_id: str) -> Event:
        event = self.events.get(event_id)
        if not event.is_public:
            raise ConflictError("This event is private")
        if user_id in (event.participants or []):
            raise ConflictError("User already joined this event")
        if (
            event.max_participants is not None
            and len(event.participants or []) >= event.max_participants
        ):
            raise ConflictError("This event is full")
        return self.events.add_participant(event_id, user_id)

    def leave(self, user_id: str, event_id: str) -> Event:
        event = self.events.get(event_id)
        if user_id not in (event.participants or []):
            raise ConflictError("User is not a participant of this event")
        return self.events.remove_participant(event_id, user_id)
