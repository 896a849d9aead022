"""
Pydantic request schemas for the Sponta API.

Bodies arrive camelCase. Field-level rules live in shared.validators so the
same checks apply to scripts and services; these models only shape input.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Fields the client actually sent, with camelCase keys."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class SignupRequest(CamelModel):
    phone_number: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    location: Any = None
    college: Optional[dict] = None
    preferred_categories: Optional[List[str]] = None
    preferred_difficulty: Optional[str] = None


class ProfileUpdateRequest(SignupRequest):
    profile_picture: Optional[str] = None
    privacy_settings: Optional[dict] = None


class FriendRequestPayload(CamelModel):
    friend_uid: str = Field(..., min_length=1)


class CompleteChallengeRequest(CamelModel):
    photo_url: Optional[str] = None
    location: Optional[dict] = None


class GenerateChallengeRequest(CamelModel):
    category: Optional[str] = None
    difficulty: Optional[str] = None
    location: Optional[dict] = None
    custom_description: Optional[str] = Field(default=None, max_length=500)
    people_count: Optional[int] = Field(default=None, ge=1)
    user_context: Optional[dict] = None


class BatchGenerateRequest(GenerateChallengeRequest):
    count: int = Field(default=5, ge=1)


class EventRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[dict] = None
    category: Optional[str] = None
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None
    max_participants: Optional[int] = None
    min_participants: Optional[int] = None
    status: Optional[
        Literal["upcoming", "ongoing", "completed", "cancelled"]
    ] = None


class PostCreateRequest(CamelModel):
    caption: Optional[str] = Field(default=None, max_length=2000)
    image_url: Optional[str] = None
    is_sponsored: bool = False


class PostUpdateRequest(CamelModel):
    caption: Optional[str] = Field(default=None, max_length=2000)
    image_url: Optional[str] = None


class SignUrlResponse(CamelModel):
    url: str
    path: str
    method: Literal["GET", "PUT"]
    expires_in: int
