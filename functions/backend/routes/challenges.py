"""
Challenge browsing, generation, acceptance and completion endpoints.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.auth import CurrentUser
from backend.dependencies import (
    get_challenge_service,
    get_current_user,
    get_generation_service,
    get_optional_user,
)
from backend.responses import paginate, success
from backend.schemas import (
    BatchGenerateRequest,
    CompleteChallengeRequest,
    GenerateChallengeRequest,
)
from backend.services.challenge_generation import ChallengeGenerationService
from backend.services.challenges import ChallengeService
from challenges.generation import get_generation_info
from shared.api import ChallengeGenerationOptions
from shared.constants import CHALLENGE_CATEGORIES, DEFAULT_NEARBY_RADIUS_METERS
from shared.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _options(payload: GenerateChallengeRequest) -> ChallengeGenerationOptions:
    return ChallengeGenerationOptions(
        category=payload.category,
        difficulty=payload.difficulty,
        user_context=payload.user_context or {},
        location=payload.location,
        custom_description=payload.custom_description,
        people_count=payload.people_count,
    )


@router.get("")
def list_challenges(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    items, pagination = paginate(
        service.list_challenges(category=category, difficulty=difficulty), page, limit
    )
    return success(items, pagination=pagination)


@router.get("/categories")
def get_categories():
    return success(CHALLENGE_CATEGORIES)


@router.get("/generate/info")
def generation_info():
    return success(get_generation_info())


@router.get("/nearby")
def nearby_challenges(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius: Optional[float] = None,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    if lat is None or lng is None:
        raise ValidationError("Latitude and longitude are required")
    return success(service.nearby(lat, lng, radius or DEFAULT_NEARBY_RADIUS_METERS))


@router.get("/my")
def my_challenges(
    status: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    return success(service.my_challenges(user.uid, status=status))


@router.get("/daily")
def daily_challenge(
    timezone: Optional[str] = None,
    force_regenerate: str = Query(default="false", alias="forceRegenerate"),
    category: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    service: ChallengeGenerationService = Depends(get_generation_service),
):
    challenge = service.get_daily_for_user(
        user.uid,
        timezone=timezone or "UTC",
        force_regenerate=force_regenerate.lower() == "true",
        category=category,
    )
    logger.info("Daily challenge for %s: %s", user.uid, challenge.id)
    return success(challenge)


@router.post("/generate", status_code=201)
def generate_challenge(
    payload: GenerateChallengeRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ChallengeGenerationService = Depends(get_generation_service),
):
    challenge = service.generate_and_save(_options(payload))
    return success(challenge, message="Challenge generated successfully")


@router.post("/generate/batch", status_code=201)
def generate_batch(
    payload: BatchGenerateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ChallengeGenerationService = Depends(get_generation_service),
):
    result = service.generate_multiple(payload.count, _options(payload))
    return success(
        result,
        message=(
            f"Generated {result['successCount']} out of "
            f"{result['totalRequested']} challenges"
        ),
    )


@router.get("/{challenge_id}")
def get_challenge(
    challenge_id: str,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    return success(service.get_challenge(challenge_id))


@router.get("/{challenge_id}/progress")
def challenge_progress(
    challenge_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    return success(service.progress(user.uid, challenge_id))


@router.post("/{challenge_id}/accept")
def accept_challenge(
    challenge_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    result = service.accept(user.uid, challenge_id)
    return success(result, message="Challenge accepted successfully")


@router.post("/{challenge_id}/complete")
def complete_challenge(
    challenge_id: str,
    payload: CompleteChallengeRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    result = service.complete(
        user.uid, challenge_id, photo_url=payload.photo_url, location=payload.location
    )
    message = (
        "Challenge completed successfully"
        if result.ai_verification.verified
        else "Photo could not be verified. Please try again."
    )
    return success(result, message=message)
