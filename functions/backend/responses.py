"""
JSON envelope helpers shared by the route modules.
"""

from __future__ import annotations

import dataclasses
import math
from typing import Any, Optional

from backend.repositories.base import dump_document
from shared.validators import validate_pagination


def to_json(value: Any) -> Any:
    """Recursively turns dataclasses into camelCase dicts."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dump_document(value)
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


def success(
    data: Any = None,
    message: Optional[str] = None,
    pagination: Optional[dict] = None,
) -> dict:
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_json(data)
    if pagination is not None:
        body["pagination"] = pagination
    return body


def error_body(
    name: str, message: str, errors: Optional[list] = None
) -> dict:
    body = {"success": False, "error": name, "message": message}
    if errors:
        body["errors"] = errors
    return body


def paginate(items: list, page=None, limit=None) -> tuple[list, dict]:
    """Slices a full result list and returns it with pagination metadata."""
    pagination = validate_pagination(page, limit)
    start = (pagination["page"] - 1) * pagination["limit"]
    return items[start : start + pagination["limit"]], {
        "page": pagination["page"],
        "limit": pagination["limit"],
        "total": len(items),
        "totalPages": math.ceil(len(items) / pagination["limit"]),
    }
