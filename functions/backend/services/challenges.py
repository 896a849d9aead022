"""
Challenge browsing, acceptance and photo-verified completion.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Optional, Sequence

from backend.repositories.base import dump_document
from backend.repositories.challenges import ChallengeRepository
from backend.repositories.user_challenges import UserChallengeRepository
from backend.repositories.users import UserRepository
from backend.services.streaks import StreakService
from backend.storage import StorageClient
from challenges.verification import DEFAULT_PHOTO_URL_HOSTS, verify_challenge_photo
from shared.api import ChallengeCompletion, ChallengeProgress
from shared.constants import (
    AI_VERIFIER_ID,
    DEFAULT_NEARBY_RADIUS_METERS,
    POINTS_CHALLENGE_COMPLETE,
)
from shared.errors import ConflictError, NotFoundError
from shared.types import Challenge, UserChallenge, UserChallengeStatus

logger = logging.getLogger(__name__)


class ChallengeService:
    def __init__(
        self,
        challenges: ChallengeRepository,
        user_challenges: UserChallengeRepository,
        users: UserRepository,
        streaks: StreakService,
        storage: Optional[StorageClient] = None,
        gemini_api_key: Optional[str] = None,
        photo_fetch_timeout: float = 30,
        photo_url_hosts: Sequence[str] = DEFAULT_PHOTO_URL_HOSTS,
    ):
        self.challenges = challenges
        self.user_challenges = user_challenges
        self.users = users
        self.streaks = streaks
        self.storage = storage
        self.gemini_api_key = gemini_api_key
        self.photo_fetch_timeout = photo_fetch_timeout
        self.photo_url_hosts = tuple(photo_url_hosts)

    def list_challenges(
        self, category: Optional[str] = None, difficulty: Optional[str] = None
    ) -> List[Challenge]:
        return self.challenges.list_active(category=category, difficulty=difficulty)

    def get_challenge(self, challenge_id: str) -> Challenge:
        return self.challenges.get(challenge_id)

    def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_meters: float = DEFAULT_NEARBY_RADIUS_METERS,
    ) -> List[Challenge]:
        return self.challenges.nearby(latitude, longitude, radius_meters)

    def accept(self, user_id: str, challenge_id: str) -> dict:
        challenge = self.challenges.get(challenge_id)
        if self.user_challenges.find_for(user_id, challenge_id):
            raise ConflictError("Challenge already accepted")

        user_challenge = self.user_challenges.create(user_id, challenge_id)
        self.challenges.increment_accepts(challenge_id)
        logger.info("User %s accepted challenge %s", user_id, challenge_id)
        return {"userChallenge": user_challenge, "challenge": challenge}

    def complete(
        self,
        user_id: str,
        challenge_id: str,
        photo_url: Optional[str] = None,
        location: Optional[dict] = None,
    ) -> ChallengeCompletion:
        """
        Submits a completion photo and records the verification outcome.

        Points, the completion counter and the streak only move when the
        photo is verified. An unverified attempt leaves the challenge
        accepted so the user can retry.
        """
        challenge = self.challenges.get(challenge_id)
        user_challenge = self.user_challenges.find_for(user_id, challenge_id)
        if user_challenge is None:
            raise NotFoundError(
                message="Challenge not accepted. Please accept the challenge first."
            )
        if user_challenge.status == UserChallengeStatus.COMPLETED:
            raise ConflictError("Challenge already completed")

        ai_verification = verify_challenge_photo(
            dump_document(challenge),
            photo_url,
            user_id,
            location=location,
            api_key=self.gemini_api_key,
            storage_client=self.storage,
            timeout=self.photo_fetch_timeout,
            allowed_hosts=self.photo_url_hosts,
        )
        logger.info(
            "AI verification for %s/%s: verified=%s confidence=%.2f",
            user_id,
            challenge_id,
            ai_verification.verified,
            ai_verification.confidence,
        )

        points = challenge.points or POINTS_CHALLENGE_COMPLETE
        updated = self.user_challenges.complete(
            user_challenge.id,
            photo_url,
            location,
            verified=ai_verification.verified,
            points_earned=points,
            verified_by=AI_VERIFIER_ID,
            verification=asdict(ai_verification),
        )

        streak = None
        points_earned = 0
        if ai_verification.verified:
            points_earned = points
            self.users.add_points(user_id, points)
            self.challenges.increment_completions(challenge_id)
            streak = self.streaks.update_streak(user_id)

        return ChallengeCompletion(
            user_challenge=updated,
            challenge=self.challenges.get(challenge_id),
            points_earned=points_earned,
            ai_verification=ai_verification,
            streak=streak,
        )

    def my_challenges(
        self, user_id: str, status: Optional[str] = None
    ) -> List[UserChallenge]:
        return self.user_challenges.list_for_user(user_id, status=status)

    def progress(self, user_id: str, challenge_id: str) -> ChallengeProgress:
        challenge = self.challenges.get(challenge_id)
        user_challenge: Optional[UserChallenge] = self.user_challenges.find_for(
            user_id, challenge_id
        )
        return ChallengeProgress(
            challenge=challenge,
            user_challenge=user_challenge,
            has_accepted=user_challenge is not None,
            is_completed=(
                user_challenge is not None
                and user_challenge.status == UserChallengeStatus.COMPLETED
            ),
        )
