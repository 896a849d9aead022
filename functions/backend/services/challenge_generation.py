"""
Persists generated challenges and hands out one daily challenge per user.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Optional

from backend.repositories.challenges import ChallengeRepository
from backend.repositories.daily_challenges import DailyChallengeRepository
from backend.repositories.users import UserRepository
from challenges.generation import generate_challenge
from shared.api import ChallengeGenerationOptions
from shared.constants import MAX_BATCH_GENERATION, TEST_CATEGORY
from shared.errors import BadRequestError
from shared.geo_utils import parse_lat_lng
from shared.time_utils import local_date, resolve_timezone, utc_now
from shared.types import Challenge, User

logger = logging.getLogger(__name__)


def resolve_daily_preferences(
    user: Optional[User], category: Optional[str] = None, rng=random
) -> dict:
    """
    Picks category, difficulty and location for a user's daily challenge.

    An explicit category wins. Otherwise "test" is used when the user
    prefers it, else a random preferred category.
    """
    preferred = (user.preferred_categories if user else None) or []
    if not category and preferred:
        category = TEST_CATEGORY if TEST_CATEGORY in preferred else rng.choice(preferred)
    return {
        "category": category or None,
        "difficulty": (user.preferred_difficulty if user else None) or None,
        "location": parse_lat_lng(user.location) if user else None,
    }


class ChallengeGenerationService:
    def __init__(
        self,
        challenges: ChallengeRepository,
        daily_challenges: DailyChallengeRepository,
        users: UserRepository,
        gemini_api_key: Optional[str] = None,
        batch_delay_seconds: float = 1.0,
        rng=random,
    ):
        self.challenges = challenges
        self.daily_challenges = daily_challenges
        self.users = users
        self.gemini_api_key = gemini_api_key
        self.batch_delay_seconds = batch_delay_seconds
        self.rng = rng

    def generate(self, options: Optional[ChallengeGenerationOptions] = None) -> dict:
        return generate_challenge(options, api_key=self.gemini_api_key, rng=self.rng)

    def generate_and_save(
        self, options: Optional[ChallengeGenerationOptions] = None
    ) -> Challenge:
        challenge = self.challenges.create(self.generate(options))
        logger.info(
            "Generated challenge %s (%s/%s)",
            challenge.id,
            challenge.category,
            challenge.difficulty,
        )
        return challenge

    def generate_multiple(
        self, count: int = 5, options: Optional[ChallengeGenerationOptions] = None
    ) -> dict:
        if count > MAX_BATCH_GENERATION:
            raise BadRequestError(
                f"Cannot generate more than {MAX_BATCH_GENERATION} challenges at once"
            )

        generated = []
        errors = []
        for index in range(count):
            try:
                generated.append(self.generate_and_save(options))
            except Exception as e:
                logger.error("Failed to generate challenge %d: %s", index + 1, e)
                errors.append({"index": index, "error": str(e)})
                continue
            # Pause between model calls.
            if index < count - 1 and self.batch_delay_seconds:
                time.sleep(self.batch_delay_seconds)

        return {
            "challenges": generated,
            "errors": errors,
            "successCount": len(generated),
            "totalRequested": count,
        }

    def get_or_generate_daily(
        self,
        user_id: str,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        location: Optional[dict] = None,
        timezone: Optional[str] = None,
        force_regenerate: bool = False,
        user_context: Optional[dict] = None,
    ) -> Challenge:
        """
        Returns the user's challenge for today in their timezone.

        The first call of the day generates and caches a challenge; later
        calls return the cached one unless regeneration is forced or the
        cached challenge no longer exists.
        """
        today = local_date(utc_now(), timezone)

        if not force_regenerate:
            cached = self.daily_challenges.get(user_id, today)
            if cached:
                challenge = self.challenges.find(cached.get("challengeId"))
                if challenge is not None:
                    return challenge
                logger.warning(
                    "Daily challenge %s for %s is gone, regenerating",
                    cached.get("challengeId"),
                    user_id,
                )

        challenge = self.generate_and_save(
            ChallengeGenerationOptions(
                category=category,
                difficulty=difficulty,
                user_context=user_context or {},
                location=location,
            )
        )
        self.daily_challenges.set(
            user_id,
            today,
            challenge.id,
            str(resolve_timezone(timezone)),
            category=challenge.category,
            difficulty=challenge.difficulty,
        )
        return challenge

    def get_daily_for_user(
        self,
        user_id: str,
        timezone: Optional[str] = None,
        force_regenerate: bool = False,
        category: Optional[str] = None,
    ) -> Challenge:
        """Resolves the user's preferences, then returns today's challenge."""
        user = self.users.find(user_id)
        preferences = resolve_daily_preferences(user, category, rng=self.rng)
        return self.get_or_generate_daily(
            user_id,
            category=preferences["category"],
            difficulty=preferences["difficulty"],
            location=preferences["location"],
            timezone=timezone,
            force_regenerate=force_regenerate,
            user_context={
                "displayName": user.display_name if user else None,
                "college": user.college if user else None,
            },
        )
