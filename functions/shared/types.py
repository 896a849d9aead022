# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================


from enum import StrEnum
from dataclasses import dataclass, field
from typing import Any, List, Optional


class UserChallengeStatus(StrEnum):
    ACCEPTED = "accepted"
    COMPLETED = "completed"
    FAILED = "failed"


class EventStatus(StrEnum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Frequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    ONE_TIME = "one-time"


class NotificationType(StrEnum):
    STREAK_MILESTONE = "streak_milestone"
    STREAK_REMINDER = "streak_reminder"
    STREAK_BROKEN = "streak_broken"
    CHALLENGE_COMPLETED = "challenge_completed"
    CHALLENGE_ACCEPTED = "challenge_accepted"
    FRIEND_REQUEST = "friend_request"
    FRIEND_ACCEPTED = "friend_accepted"
    EVENT_REMINDER = "event_reminder"
    POINTS_MILESTONE = "points_milestone"
    LEVEL_UP = "level_up"


def _default_friend_requests() -> dict:
    return {"sent": [], "received": []}


def _default_privacy_settings() -> dict:
    return {
        "show_on_leaderboard": True,
        "allow_friend_requests": True,
        "show_location": True,
    }


@dataclass
class User:
    """Profile document stored in the users collection, keyed by auth uid."""

    uid: str
    display_name: str = ""
    phone_number: Optional[str] = None
    email: Optional[str] = None
    date_of_birth: Any = None
    # Either a "lat,lng" string from onboarding or a location dict.
    location: Any = None
    college: dict = field(default_factory=lambda: {"name": "", "verified": False})
    profile_picture: Optional[str] = None
    points: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Any = None
    friends: List[str] = field(default_factory=list)
    friend_requests: dict = field(default_factory=_default_friend_requests)
    privacy_settings: dict = field(default_factory=_default_privacy_settings)
    preferred_categories: List[str] = field(default_factory=list)
    preferred_difficulty: Optional[str] = None
    created_at: Any = None
    updated_at: Any = None
    id: str = ""


@dataclass
class Challenge:
    id: str
    title: str
    description: str
    category: str
    difficulty: str
    points: int = 10
    duration: Optional[int] = None
    requires_photo: bool = True
    requires_location: bool = False
    frequency: str = Frequency.DAILY
    location: Optional[dict] = None
    is_active: bool = True
    is_featured: bool = False
    total_completions: int = 0
    total_accepts: int = 0
    start_date: Any = None
    end_date: Any = None
    created_at: Any = None
    updated_at: Any = None
    # Only set on nearby queries.
    distance: Optional[float] = None


@dataclass
class UserChallenge:
    """A user's accepted (and possibly completed) challenge."""

    id: str
    user_id: str
    challenge_id: str
    status: str = UserChallengeStatus.ACCEPTED
    accepted_at: Any = None
    completed_at: Any = None
    photo_url: Optional[str] = None
    location: Optional[dict] = None
    verified: bool = False
    verified_at: Any = None
    verified_by: Optional[str] = None
    verification: Optional[dict] = None
    points_earned: int = 0
    created_at: Any = None
    updated_at: Any = None


@dataclass
class Post:
    id: str
    user_id: str
    username: str
    user_image: Optional[str] = None
    image_url: Optional[str] = None
    caption: str = ""
    likes: int = 0
    liked_by: List[str] = field(default_factory=list)
    is_sponsored: bool = False
    created_at: Any = None
    updated_at: Any = None
    timestamp: Any = None


@dataclass
class Event:
    id: str
    title: str
    description: str = ""
    start_time: Any = None
    end_time: Any = None
    location: Optional[dict] = None
    category: Optional[str] = None
    created_by: Optional[str] = None
    user_id: Optional[str] = None
    participants: List[str] = field(default_factory=list)
    status: str = EventStatus.UPCOMING
    is_public: bool = True
    tags: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    max_participants: Optional[int] = None
    min_participants: Optional[int] = None
    created_at: Any = None
    updated_at: Any = None
    distance: Optional[float] = None


@dataclass
class Notification:
    id: str
    user_id: str
    type: str
    title: str
    body: str
    data: dict = field(default_factory=dict)
    priority: str = "normal"
    read: bool = False
    created_at: Any = None
    updated_at: Any = None
