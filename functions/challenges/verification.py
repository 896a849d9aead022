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


"""Checks whether a completion photo is evidence that a challenge was done."""

import logging
import mimetypes
from typing import Iterable, Optional
from urllib.parse import unquote, urlparse

import requests

from models import gemini
from models import prompts
from shared.api import AiVerification
from shared.constants import PHOTO_UPLOAD_PREFIX
from shared.json_utils import extract_json_object

logger = logging.getLogger(__name__)

PHOTO_FETCH_TIMEOUT = 30  # seconds
DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"
DEFAULT_PHOTO_URL_HOSTS = (
    "firebasestorage.googleapis.com",
    "storage.googleapis.com",
)

# Hints for what the model should look for, matched against the challenge text.
KNOWLEDGE_BASE = [
    {
        "id": "outdoor_generic",
        "tags": ["outdoor", "outside", "explore", "park", "nature"],
        "prompt": (
            "The user should clearly be outside. Look for sky, trees, streets, "
            "grass, or buildings in the background. Indoor backgrounds, for "
            "example walls, beds, desks or kitchens, should not count."
        ),
    },
    {
        "id": "social_selfie",
        "tags": ["friends", "social", "party", "group"],
        "prompt": (
            "The user should be in the photo with at least one other person. "
            "A selfie with only one face does not count as a social challenge."
        ),
    },
    {
        "id": "exercise_generic",
        "tags": ["run", "jog", "exercise", "gym", "workout", "fitness"],
        "prompt": (
            "The user should appear to be exercising, for example running, using "
            "gym equipment, stretching on a mat, or on a sports field. A random "
            "selfie at a desk or in bed should not count."
        ),
    },
    {
        "id": "default",
        "tags": [],
        "prompt": (
            "The image should show strong visual evidence that the user really "
            "did what the challenge description says. If the image is vague or "
            "unrelated, mark it as not completed."
        ),
    },
]

REASON_NO_API_KEY = "AI verification not run because API key is missing."
REASON_NO_PHOTO = "No photo URL was provided."
REASON_PHOTO_NOT_ALLOWED = "Photo must be uploaded to your own challenge photo folder."
REASON_BAD_FORMAT = "AI returned an unexpected format while verifying the photo."
REASON_API_ERROR = "AI verification failed due to an API error."
REASON_MISSING = "No reasoning provided by AI."


class PhotoFetchError(Exception):
    pass


class PhotoNotAllowedError(PhotoFetchError):
    """The photo reference points outside the submitting user's folder."""


def pick_rag_context(challenge: dict) -> dict:
    """Returns the first knowledge base entry whose tag appears in the challenge."""
    text = " ".join(
        [
            challenge.get("title") or "",
            challenge.get("description") or "",
            challenge.get("category") or "",
        ]
    ).lower()
    for entry in KNOWLEDGE_BASE:
        if entry["id"] == "default":
            continue
        if any(tag in text for tag in entry["tags"]):
            return entry
    return next(entry for entry in KNOWLEDGE_BASE if entry["id"] == "default")


def photo_prefix(user_id: str) -> str:
    return f"{PHOTO_UPLOAD_PREFIX}/{user_id}/"


def _has_dot_segments(path: str) -> bool:
    segments = path.split("/")
    return ".." in segments or "." in segments


def _check_storage_path(path: str, user_id: Optional[str]) -> None:
    if not user_id or _has_dot_segments(path) or not path.startswith(
        photo_prefix(user_id)
    ):
        raise PhotoNotAllowedError(f"Photo is outside the user's folder: {path}")


def _check_photo_url(
    photo_url: str, user_id: Optional[str], allowed_hosts: Iterable[str]
) -> None:
    parsed = urlparse(photo_url)
    if parsed.scheme != "https":
        raise PhotoNotAllowedError(f"Photo URLs must use https: {photo_url}")
    if parsed.username or parsed.password:
        raise PhotoNotAllowedError("Photo URLs must not carry credentials")
    if parsed.hostname not in set(allowed_hosts) or parsed.port not in (None, 443):
        raise PhotoNotAllowedError(f"Photo host is not allowed: {parsed.hostname}")
    # Firebase download URLs percent-encode the object path.
    path = unquote(parsed.path)
    if not user_id or _has_dot_segments(path) or f"/{photo_prefix(user_id)}" not in path:
        raise PhotoNotAllowedError(f"Photo is outside the user's folder: {photo_url}")


def fetch_photo_bytes(
    photo_url: str,
    user_id: Optional[str],
    storage_client=None,
    timeout: float = PHOTO_FETCH_TIMEOUT,
    allowed_hosts: Iterable[str] = DEFAULT_PHOTO_URL_HOSTS,
) -> tuple[bytes, str]:
    """
    Loads a completion photo that belongs to user_id.

    Args:
        photo_url: A storage path such as "challenge-photos/<uid>/<file>.jpg",
            or an https URL on one of allowed_hosts whose object path lies
            in the user's photo folder.
        user_id: The uid of the user submitting the photo.
        storage_client: Anything with get_bytes(path); required for paths.
        timeout: Seconds to wait for an HTTP download.
        allowed_hosts: Storage hosts photos may be downloaded from.

    Returns:
        tuple[bytes, str]: The image bytes and their mime type.

    Raises:
        PhotoNotAllowedError: The reference is outside the user's folder or
            on a host that is not allowed.
        PhotoFetchError: The photo could not be loaded.
    """
    guessed_type = mimetypes.guess_type(photo_url.split("?", 1)[0])[0]
    if "://" in photo_url:
        _check_photo_url(photo_url, user_id, allowed_hosts)
        try:
            response = requests.get(photo_url, timeout=timeout, allow_redirects=False)
            response.raise_for_status()
        except requests.RequestException as e:
            raise PhotoFetchError(f"Could not download {photo_url}: {e}") from e
        if response.is_redirect:
            raise PhotoFetchError(f"Photo download was redirected: {photo_url}")
        content_type = response.headers.get("Content-Type", "").split(";")[0]
        if not content_type.startswith("image/"):
            content_type = guessed_type or DEFAULT_IMAGE_MIME_TYPE
        return response.content, content_type

    path = photo_url.lstrip("/")
    _check_storage_path(path, user_id)
    if storage_client is None:
        raise PhotoFetchError(f"No storage client to read {path}")
    try:
        data = storage_client.get_bytes(path)
    except FileNotFoundError as e:
        raise PhotoFetchError(f"Photo not found in storage: {path}") from e
    return data, guessed_type or DEFAULT_IMAGE_MIME_TYPE


def _clamp_confidence(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return max(0.0, min(1.0, float(value)))


def verify_challenge_photo(
    challenge: dict,
    photo_url: Optional[str],
    user_id: Optional[str],
    location: Optional[dict] = None,
    api_key: Optional[str] = None,
    storage_client=None,
    timeout: float = PHOTO_FETCH_TIMEOUT,
    allowed_hosts: Iterable[str] = DEFAULT_PHOTO_URL_HOSTS,
) -> AiVerification:
    """
    Asks Gemini whether the photo shows the challenge being completed.

    Only photos inside user_id's own photo folder are read. Never raises:
    missing inputs, rejected photos and model failures come back as an
    unverified result with a reason the client can show.
    """
    if not api_key:
        logger.warning("Gemini API key is not set, skipping AI verification.")
        return AiVerification(verified=False, confidence=0, reasoning=REASON_NO_API_KEY)

    if not photo_url:
        return AiVerification(verified=False, confidence=0, reasoning=REASON_NO_PHOTO)

    rag_context = pick_rag_context(challenge)
    challenge_text = " - ".join(
        part
        for part in [challenge.get("title") or "", challenge.get("description") or ""]
        if part
    )
    prompt = prompts.make_photo_verification_prompt(
        challenge_text, rag_context["prompt"], location
    )

    try:
        image_bytes, mime_type = fetch_photo_bytes(
            photo_url,
            user_id,
            storage_client=storage_client,
            timeout=timeout,
            allowed_hosts=allowed_hosts,
        )
        raw_text = gemini.call_predict_with_image(
            prompt,
            image_bytes,
            mime_type=mime_type,
            system_instruction=prompts.PHOTO_VERIFICATION_SYSTEM_PROMPT,
            api_key=api_key,
        )
    except PhotoNotAllowedError as e:
        logger.warning("Rejected completion photo from %s: %s", user_id, e)
        return AiVerification(
            verified=False, confidence=0, reasoning=REASON_PHOTO_NOT_ALLOWED
        )
    except gemini.GeminiInvalidResponseException:
        logger.error("Gemini returned an empty verification response")
        return AiVerification(verified=False, confidence=0, reasoning=REASON_BAD_FORMAT)
    except Exception as e:
        logger.error("Error calling Gemini for photo verification: %s", e)
        return AiVerification(verified=False, confidence=0, reasoning=REASON_API_ERROR)

    try:
        parsed = extract_json_object(raw_text)
    except ValueError:
        logger.error("Failed to parse AI JSON, raw content: %s", raw_text)
        return AiVerification(verified=False, confidence=0, reasoning=REASON_BAD_FORMAT)

    return AiVerification(
        verified=parsed.get("verified") is True,
        confidence=_clamp_confidence(parsed.get("confidence")),
        reasoning=parsed.get("reasoning") or REASON_MISSING,
    )
