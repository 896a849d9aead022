"""
Signed URL endpoint for challenge photo storage.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from backend.auth import CurrentUser
from backend.dependencies import get_current_user, get_storage_client
from backend.responses import success
from backend.schemas import SignUrlResponse
from backend.storage import StorageClient
from shared.constants import PHOTO_UPLOAD_PREFIX
from shared.errors import BadRequestError, ForbiddenError

router = APIRouter()


def upload_prefix(uid: str) -> str:
    return f"{PHOTO_UPLOAD_PREFIX}/{uid}/"


@router.get("/sign-url")
def sign_url(
    path: str = Query(..., min_length=1, description="Object path in storage"),
    op: str = Query("get", pattern="^(get|put)$"),
    expires_in: int = Query(3600, ge=60, le=86400, alias="expiresIn"),
    user: CurrentUser = Depends(get_current_user),
    storage: StorageClient = Depends(get_storage_client),
):
    path = path.lstrip("/")
    if ".." in path.split("/"):
        raise BadRequestError("Invalid storage path")

    if op == "get":
        # Any user's challenge photos may be read; nothing else in the bucket.
        if not path.startswith(f"{PHOTO_UPLOAD_PREFIX}/"):
            raise ForbiddenError(f"Downloads must come from {PHOTO_UPLOAD_PREFIX}/")
        url = storage.presign_get(path, expires_in=expires_in)
    else:
        if not path.startswith(upload_prefix(user.uid)):
            raise ForbiddenError(
                f"Uploads must be stored under {upload_prefix(user.uid)}"
            )
        url = storage.presign_put(path, expires_in=expires_in)

    response = SignUrlResponse(
        url=url, path=path, method=op.upper(), expires_in=expires_in
    )
    return success(response.model_dump(by_alias=True))
