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


from dataclasses import dataclass, field
from typing import Any, Optional

from shared.types import Challenge, UserChallenge


@dataclass
class ChallengeGenerationOptions:
    """Inputs for generating a challenge from the template table."""

    category: Optional[str] = None
    difficulty: Optional[str] = None
    user_context: dict = field(default_factory=dict)
    location: Optional[dict] = None
    custom_description: Optional[str] = None
    people_count: Optional[int] = None


@dataclass
class AiVerification:
    """Outcome of checking a completion photo with the vision model."""

    verified: bool
    confidence: float
    reasoning: str


@dataclass
class StreakUpdate:
    current_streak: int
    longest_streak: int
    last_activity_date: Any
    completed_today: bool


@dataclass
class StreakInfo:
    current_streak: int
    longest_streak: int
    last_activity_date: Any
    is_active_today: bool


@dataclass
class ChallengeProgress:
    challenge: Challenge
    user_challenge: Optional[UserChallenge]
    has_accepted: bool
    is_completed: bool


@dataclass
class ChallengeCompletion:
    """Result of submitting a completion photo for a challenge."""

    user_challenge: UserChallenge
    challenge: Challenge
    points_earned: int
    ai_verification: AiVerification
    streak: Optional[StreakUpdate] = None
