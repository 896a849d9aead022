"""
Event creation, discovery and membership endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.auth import CurrentUser
from backend.dependencies import get_current_user, get_event_service, get_optional_user
from backend.responses import paginate, success
from backend.schemas import EventRequest
from backend.services.events import EventService
from shared.constants import DEFAULT_NEARBY_RADIUS_METERS
from shared.errors import ValidationError

router = APIRouter()


@router.post("", status_code=201)
def create_event(
    payload: EventRequest,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return success(service.create(user.uid, payload.to_document()))


@router.get("")
def list_events(
    status: Optional[str] = None,
    is_public: Optional[str] = Query(default=None, alias="isPublic"),
    category: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: EventService = Depends(get_event_service),
):
    events = service.list_events(
        status=status,
        is_public=None if is_public is None else is_public == "true",
        category=category,
    )
    items, pagination = paginate(events, page, limit)
    return success(items, pagination=pagination)


@router.get("/nearby")
def nearby_events(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: EventService = Depends(get_event_service),
):
    if lat is None or lng is None:
        raise ValidationError("Latitude and longitude are required")
    return success(service.nearby(lat, lng, radius or DEFAULT_NEARBY_RADIUS_METERS))


@router.get("/{event_id}")
def get_event(
    event_id: str,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: EventService = Depends(get_event_service),
):
    return success(service.get(event_id))


@router.put("/{event_id}")
def update_event(
    event_id: str,
    payload: EventRequest,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return success(service.update(user.uid, event_id, payload.to_document()))


@router.post("/{event_id}/join")
def join_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    event = service.join(user.uid, event_id)
    return success(event, message="Joined event successfully")


@router.post("/{event_id}/leave")
def leave_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    event = service.leave(user.uid, event_id)
    return success(event, message="Left event successfully")
