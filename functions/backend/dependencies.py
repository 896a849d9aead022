"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header

from backend.auth import (
    TOKEN_EXPIRED,
    TOKEN_MALFORMED,
    TOKEN_REVOKED,
    AuthClient,
    CurrentUser,
    FirebaseAuthClient,
    InMemoryAuthClient,
    InvalidTokenError,
)
from backend.config import get_settings
from backend.db import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    SqlDocumentStore,
)
from backend.firebase import get_firebase_app
from backend.repositories.challenges import ChallengeRepository
from backend.repositories.daily_challenges import DailyChallengeRepository
from backend.repositories.events import EventRepository
from backend.repositories.notifications import NotificationRepository
from backend.repositories.posts import PostRepository
from backend.repositories.user_challenges import UserChallengeRepository
from backend.repositories.users import UserRepository
from backend.services.auth import AuthService
from backend.services.challenge_generation import ChallengeGenerationService
from backend.services.challenges import ChallengeService
from backend.services.events import EventService
from backend.services.notifications import NotificationService
from backend.services.posts import PostService
from backend.services.streaks import StreakService
from backend.services.users import UserService
from backend.storage import (
    FirebaseStorageClient,
    InMemoryStorageClient,
    S3StorageClient,
    StorageClient,
)
from shared.errors import UnauthorizedError

_document_store: DocumentStore | None = None
_storage_client: StorageClient | None = None
_auth_client: AuthClient | None = None

TOKEN_MESSAGES = {
    TOKEN_EXPIRED: "Token expired",
    TOKEN_REVOKED: "Token revoked",
    TOKEN_MALFORMED: "Invalid token",
}


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so state persists across requests.
    """
    global _document_store
    if _document_store is not None:
        return _document_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _document_store = InMemoryDocumentStore()
    elif settings.firebase_enabled:
        get_firebase_app(settings)
        _document_store = FirestoreDocumentStore()
    elif settings.database_url:
        _document_store = SqlDocumentStore(settings.database_url)
    else:
        _document_store = InMemoryDocumentStore()
    return _document_store


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client is not None:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
    elif settings.firebase_enabled and settings.firebase_storage_bucket:
        get_firebase_app(settings)
        _storage_client = FirebaseStorageClient(settings.firebase_storage_bucket)
    elif settings.s3_bucket:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    else:
        _storage_client = InMemoryStorageClient()
    return _storage_client


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client is not None:
        return _auth_client

    settings = get_settings()
    if settings.firebase_enabled and not settings.use_in_memory_backends:
        _auth_client = FirebaseAuthClient(get_firebase_app(settings))
    else:
        _auth_client = InMemoryAuthClient()
    return _auth_client


def reset_backends() -> None:
    """Drops the cached backends; the next request rebuilds them from settings."""
    global _document_store, _storage_client, _auth_client
    _document_store = None
    _storage_client = None
    _auth_client = None


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer ") :].strip() or None


def _decode(auth_client: AuthClient, token: str) -> CurrentUser:
    claims = auth_client.verify_id_token(token)
    return CurrentUser(
        uid=claims["uid"],
        email=claims.get("email"),
        phone_number=claims.get("phone_number"),
    )


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth_client: AuthClient = Depends(get_auth_client),
) -> CurrentUser:
    token = _bearer_token(authorization)
    if not token:
        raise UnauthorizedError("No token provided")
    try:
        return _decode(auth_client, token)
    except InvalidTokenError as e:
        raise UnauthorizedError(
            TOKEN_MESSAGES.get(e.reason, "Invalid or expired token")
        ) from e


def get_optional_user(
    authorization: Optional[str] = Header(default=None),
    auth_client: AuthClient = Depends(get_auth_client),
) -> Optional[CurrentUser]:
    token = _bearer_token(authorization)
    if not token:
        return None
    try:
        return _decode(auth_client, token)
    except InvalidTokenError:
        return None


def get_notification_service(
    store: DocumentStore = Depends(get_document_store),
) -> NotificationService:
    return NotificationService(NotificationRepository(store), UserRepository(store))


def get_streak_service(
    store: DocumentStore = Depends(get_document_store),
    notifications: NotificationService = Depends(get_notification_service),
) -> StreakService:
    return StreakService(
        UserRepository(store), UserChallengeRepository(store), notifications
    )


def get_auth_service(
    store: DocumentStore = Depends(get_document_store),
    auth_client: AuthClient = Depends(get_auth_client),
) -> AuthService:
    return AuthService(auth_client, UserRepository(store))


def get_user_service(store: DocumentStore = Depends(get_document_store)) -> UserService:
    return UserService(
        UserRepository(store),
        UserChallengeRepository(store),
        ChallengeRepository(store),
        EventRepository(store),
    )


def get_challenge_service(
    store: DocumentStore = Depends(get_document_store),
    storage: StorageClient = Depends(get_storage_client),
    streaks: StreakService = Depends(get_streak_service),
) -> ChallengeService:
    settings = get_settings()
    return ChallengeService(
        ChallengeRepository(store),
        UserChallengeRepository(store),
        UserRepository(store),
        streaks,
        storage=storage,
        gemini_api_key=settings.gemini_api_key,
        photo_fetch_timeout=settings.photo_fetch_timeout_seconds,
        photo_url_hosts=settings.photo_url_host_list,
    )


def get_generation_service(
    store: DocumentStore = Depends(get_document_store),
) -> ChallengeGenerationService:
    return ChallengeGenerationService(
        ChallengeRepository(store),
        DailyChallengeRepository(store),
        UserRepository(store),
        gemini_api_key=get_settings().gemini_api_key,
    )


def get_event_service(store: DocumentStore = Depends(get_document_store)) -> EventService:
    return EventService(EventRepository(store))


def get_post_service(store: DocumentStore = Depends(get_document_store)) -> PostService:
    return PostService(PostRepository(store), UserRepository(store))
