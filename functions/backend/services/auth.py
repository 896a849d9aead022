"""
Sign-up and sign-in on top of the identity provider.

Credentials are checked client-side by Firebase Auth. The API creates auth
accounts and keeps the profile document in step with them.
"""

from __future__ import annotations

import logging

from backend.auth import AuthClient, AuthUserExistsError, AuthUserNotFoundError
from backend.repositories.users import UserRepository
from shared.errors import AppError, BadRequestError, ConflictError, NotFoundError
from shared.types import User
from shared.validators import validate_required, validate_user_schema

logger = logging.getLogger(__name__)

SIGNUP_FIELDS = (
    "phoneNumber",
    "email",
    "displayName",
    "dateOfBirth",
    "location",
    "college",
    "preferredCategories",
    "preferredDifficulty",
)


class AuthService:
    def __init__(self, auth_client: AuthClient, users: UserRepository):
        self.auth_client = auth_client
        self.users = users

    def _create_account(self, data: dict) -> dict:
        try:
            auth_user = self.auth_client.create_user(
                phone_number=data.get("phoneNumber") or None,
                email=data.get("email") or None,
                display_name=data.get("displayName"),
            )
        except AuthUserExistsError as e:
            if e.field_name == "email":
                raise ConflictError("Email already registered") from e
            raise ConflictError("Phone number already registered") from e

        user = self.users.create(auth_user.uid, data)
        logger.info("Created account %s", auth_user.uid)
        return {"uid": auth_user.uid, "user": user}

    def signup(self, payload: dict) -> dict:
        data = validate_user_schema(
            {key: payload.get(key) for key in SIGNUP_FIELDS if key in payload}
        )
        if self.users.get_by_phone(data.get("phoneNumber")):
            raise ConflictError("User with this phone number already exists")
        return self._create_account(data)

    def signup_email(self, payload: dict) -> dict:
        """Email-first sign-up; the phone number is not collected."""
        validate_required(payload, ["email"])
        data = validate_user_schema(
            {
                key: payload.get(key)
                for key in SIGNUP_FIELDS
                if key in payload and key != "phoneNumber"
            }
        )
        return self._create_account(data)

    def signin(self, uid: str) -> dict:
        """Returns the profile for a verified caller, creating it if missing."""
        try:
            auth_user = self.auth_client.get_user(uid)
        except AuthUserNotFoundError as e:
            raise NotFoundError("User") from e

        user = self.users.find(uid)
        if user is None:
            logger.info("Creating missing profile for %s", uid)
            user = self.users.create(
                uid,
                {
                    "phoneNumber": auth_user.phone_number or "",
                    "email": auth_user.email,
                    "displayName": auth_user.display_name or "User",
                },
            )
        return {"uid": auth_user.uid, "user": user}

    def verify_phone(self, uid: str) -> dict:
        try:
            auth_user = self.auth_client.get_user(uid)
        except AuthUserNotFoundError as e:
            raise NotFoundError("User") from e
        if not auth_user.phone_number:
            raise BadRequestError("User does not have a phone number")
        return {"verified": True, "phoneNumber": auth_user.phone_number}

    def get_user_by_uid(self, uid: str) -> User:
        return self.users.get(uid)

    def create_custom_token(self, uid: str) -> str:
        try:
            return self.auth_client.create_custom_token(uid)
        except Exception as e:
            raise AppError(f"Failed to create custom token: {e}") from e
