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


"""Request payload validation. Payloads are camelCase dicts as sent by clients."""

import copy
import re
from datetime import datetime
from typing import Any, Iterable, Optional

from shared.constants import CHALLENGE_CATEGORIES, MIN_USER_AGE_YEARS
from shared.errors import ValidationError
from shared.time_utils import to_datetime, utc_now
from shared.types import Difficulty

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
PHONE_STRIP_PATTERN = re.compile(r"[\s\-()]")

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_required(data: dict, fields: Iterable[str]) -> None:
    missing = [name for name in fields if _is_blank(data.get(name))]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            [{"field": name, "message": f"{name} is required"} for name in missing],
        )


def validate_email(email: Optional[str]) -> None:
    if email and not EMAIL_PATTERN.match(email):
        raise ValidationError(
            "Invalid email format",
            [{"field": "email", "message": "Email format is invalid"}],
        )


def validate_phone(phone: Optional[str]) -> None:
    if phone and not PHONE_PATTERN.match(PHONE_STRIP_PATTERN.sub("", phone)):
        raise ValidationError(
            "Invalid phone number format",
            [{"field": "phoneNumber", "message": "Phone number format is invalid"}],
        )


def validate_date(value: Any) -> None:
    if value and to_datetime(value) is None:
        raise ValidationError(
            "Invalid date format",
            [{"field": "date", "message": "Date format is invalid"}],
        )


def validate_coordinates(coordinates: Optional[dict]) -> None:
    if _is_blank(coordinates):
        return
    latitude = longitude = None
    if isinstance(coordinates, dict):
        latitude = coordinates.get("latitude")
        longitude = coordinates.get("longitude")
    if not _is_number(latitude) or not _is_number(longitude):
        raise ValidationError(
            "Invalid coordinates",
            [
                {
                    "field": "coordinates",
                    "message": "Latitude and longitude must be numbers",
                }
            ],
        )
    if latitude < -90 or latitude > 90:
        raise ValidationError(
            "Invalid latitude",
            [{"field": "latitude", "message": "Latitude must be between -90 and 90"}],
        )
    if longitude < -180 or longitude > 180:
        raise ValidationError(
            "Invalid longitude",
            [
                {
                    "field": "longitude",
                    "message": "Longitude must be between -180 and 180",
                }
            ],
        )


def sanitize_string(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.strip().replace("<", "").replace(">", "")


def _parse_positive_int(value: Any, default: int) -> int:
    # Zero and unparseable values fall back to the default.
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed or default


def validate_pagination(page: Any = None, limit: Any = None) -> dict:
    page_num = _parse_positive_int(page, DEFAULT_PAGE)
    limit_num = _parse_positive_int(limit, DEFAULT_PAGE_LIMIT)
    if page_num < 1:
        raise ValidationError(
            "Page must be greater than 0",
            [{"field": "page", "message": "Page must be a positive integer"}],
        )
    if limit_num < 1 or limit_num > MAX_PAGE_LIMIT:
        raise ValidationError(
            "Limit must be between 1 and 100",
            [{"field": "limit", "message": "Limit must be between 1 and 100"}],
        )
    return {"page": page_num, "limit": limit_num}


def _collect(errors: list, check, *args) -> None:
    try:
        check(*args)
    except ValidationError as e:
        errors.extend(e.errors)


def _location_coordinates(data: dict) -> Optional[dict]:
    location = data.get("location")
    if isinstance(location, dict):
        return location.get("coordinates")
    return None


def _age_in_years(born: datetime, now: datetime) -> float:
    return (now - born).total_seconds() / (60 * 60 * 24 * 365)


def validate_user_schema(data: dict, is_update: bool = False) -> dict:
    """Validates a user create/update payload and returns a sanitized copy."""
    errors = []

    if not is_update:
        if not data.get("phoneNumber") and not data.get("email"):
            message = "Either phone number or email is required"
            errors.append({"field": "phoneNumber", "message": message})
            errors.append({"field": "email", "message": message})
        validate_required(data, ["displayName", "dateOfBirth"])

    if data.get("phoneNumber"):
        _collect(errors, validate_phone, data["phoneNumber"])
    if data.get("email"):
        _collect(errors, validate_email, data["email"])

    if data.get("dateOfBirth"):
        born = to_datetime(data["dateOfBirth"])
        if born is None:
            errors.append({"field": "dateOfBirth", "message": "Invalid date of birth"})
        elif _age_in_years(born, utc_now()) < MIN_USER_AGE_YEARS:
            errors.append(
                {
                    "field": "dateOfBirth",
                    "message": f"User must be at least {MIN_USER_AGE_YEARS} years old",
                }
            )

    _collect(errors, validate_coordinates, _location_coordinates(data))

    if errors:
        raise ValidationError("User validation failed", errors)

    sanitized = copy.deepcopy(data)
    if sanitized.get("displayName"):
        sanitized["displayName"] = sanitize_string(sanitized["displayName"])
    college = sanitized.get("college")
    if isinstance(college, dict) and college.get("name"):
        college["name"] = sanitize_string(college["name"])
    return sanitized


def validate_challenge_schema(
    data: dict, is_update: bool = False, allowed_categories=None
) -> dict:
    errors = []
    if not is_update:
        validate_required(
            data, ["title", "description", "category", "difficulty", "points"]
        )

    categories = list(allowed_categories or CHALLENGE_CATEGORIES)
    if data.get("category") and data["category"] not in categories:
        errors.append(
            {
                "field": "category",
                "message": f"Category must be one of: {', '.join(categories)}",
            }
        )

    difficulties = [d.value for d in Difficulty]
    if data.get("difficulty") and data["difficulty"] not in difficulties:
        errors.append(
            {
                "field": "difficulty",
                "message": f"Difficulty must be one of: {', '.join(difficulties)}",
            }
        )

    points = data.get("points")
    if points is not None and (not _is_number(points) or points < 0):
        errors.append(
            {"field": "points", "message": "Points must be a non-negative number"}
        )

    _collect(errors, validate_coordinates, _location_coordinates(data))

    if errors:
        raise ValidationError("Challenge validation failed", errors)

    sanitized = copy.deepcopy(data)
    for key in ("title", "description"):
        if sanitized.get(key):
            sanitized[key] = sanitize_string(sanitized[key])
    return sanitized


def validate_event_schema(data: dict, is_update: bool = False) -> dict:
    errors = []
    if not is_update:
        validate_required(data, ["title", "description", "startTime", "location"])

    start_time = None
    if data.get("startTime"):
        start_time = to_datetime(data["startTime"])
        if start_time is None:
            errors.append({"field": "startTime", "message": "Invalid start time"})
        elif start_time < utc_now():
            errors.append(
                {"field": "startTime", "message": "Start time must be in the future"}
            )

    if data.get("endTime") and data.get("startTime"):
        end_time = to_datetime(data["endTime"])
        if end_time is None:
            errors.append({"field": "endTime", "message": "Invalid end time"})
        elif start_time is not None and end_time <= start_time:
            errors.append(
                {"field": "endTime", "message": "End time must be after start time"}
            )

    _collect(errors, validate_coordinates, _location_coordinates(data))

    max_participants = data.get("maxParticipants")
    min_participants = data.get("minParticipants")
    if (
        _is_number(max_participants)
        and _is_number(min_participants)
        and max_participants < min_participants
    ):
        errors.append(
            {
                "field": "maxParticipants",
                "message": "Max participants must be greater than or equal to min participants",
            }
        )

    if errors:
        raise ValidationError("Event validation failed", errors)

    sanitized = copy.deepcopy(data)
    for key in ("title", "description"):
        if sanitized.get(key):
            sanitized[key] = sanitize_string(sanitized[key])
    location = sanitized.get("location")
    if isinstance(location, dict):
        for key in ("name", "address"):
            if location.get(key):
                location[key] = sanitize_string(location[key])
    return sanitized
