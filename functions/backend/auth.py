"""
Identity provider abstraction: Firebase Auth and an in-memory token table.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Set

from firebase_admin import auth as firebase_auth

TOKEN_MISSING = "missing"
TOKEN_EXPIRED = "expired"
TOKEN_REVOKED = "revoked"
TOKEN_MALFORMED = "malformed"
TOKEN_INVALID = "invalid"


class InvalidTokenError(Exception):
    def __init__(self, reason: str = TOKEN_INVALID):
        super().__init__(f"ID token rejected: {reason}")
        self.reason = reason


class AuthUserNotFoundError(Exception):
    pass


class AuthUserExistsError(Exception):
    def __init__(self, field_name: str):
        super().__init__(f"An auth user with this {field_name} already exists")
        self.field_name = field_name


@dataclass
class AuthUser:
    uid: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    display_name: Optional[str] = None


@dataclass
class CurrentUser:
    """The authenticated caller, as decoded from the ID token."""

    uid: str
    email: Optional[str] = None
    phone_number: Optional[str] = None


class AuthClient(Protocol):
    def verify_id_token(self, token: str) -> dict:
        ...

    def get_user(self, uid: str) -> AuthUser:
        ...

    def create_user(
        self,
        phone_number: Optional[str] = None,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> AuthUser:
        ...

    def create_custom_token(self, uid: str) -> str:
        ...


class FirebaseAuthClient:
    def __init__(self, app=None):
        self.app = app

    def verify_id_token(self, token: str) -> dict:
        try:
            return firebase_auth.verify_id_token(token, app=self.app)
        except firebase_auth.ExpiredIdTokenError as e:
            raise InvalidTokenError(TOKEN_EXPIRED) from e
        except firebase_auth.RevokedIdTokenError as e:
            raise InvalidTokenError(TOKEN_REVOKED) from e
        except (firebase_auth.InvalidIdTokenError, ValueError) as e:
            raise InvalidTokenError(TOKEN_MALFORMED) from e
        except firebase_auth.CertificateFetchError as e:
            raise InvalidTokenError(TOKEN_INVALID) from e

    @staticmethod
    def _to_auth_user(record) -> AuthUser:
        return AuthUser(
            uid=record.uid,
            email=record.email,
            phone_number=record.phone_number,
            display_name=record.display_name,
        )

    def get_user(self, uid: str) -> AuthUser:
        try:
            return self._to_auth_user(firebase_auth.get_user(uid, app=self.app))
        except firebase_auth.UserNotFoundError as e:
            raise AuthUserNotFoundError(uid) from e

    def create_user(
        self,
        phone_number: Optional[str] = None,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> AuthUser:
        kwargs = {}
        if phone_number:
            kwargs["phone_number"] = phone_number
        if email:
            kwargs["email"] = email
        if display_name:
            kwargs["display_name"] = display_name
        try:
            record = firebase_auth.create_user(app=self.app, **kwargs)
        except firebase_auth.PhoneNumberAlreadyExistsError as e:
            raise AuthUserExistsError("phone number") from e
        except firebase_auth.EmailAlreadyExistsError as e:
            raise AuthUserExistsError("email") from e
        return self._to_auth_user(record)

    def create_custom_token(self, uid: str) -> str:
        token = firebase_auth.create_custom_token(uid, app=self.app)
        return token.decode("utf-8") if isinstance(token, bytes) else token


@dataclass
class InMemoryAuthClient:
    """Test double: tokens are opaque strings mapped to uids."""

    users: Dict[str, AuthUser] = field(default_factory=dict)
    tokens: Dict[str, str] = field(default_factory=dict)
    expired_tokens: Set[str] = field(default_factory=set)
    revoked_tokens: Set[str] = field(default_factory=set)

    def reset(self) -> None:
        self.users.clear()
        self.tokens.clear()
        self.expired_tokens.clear()
        self.revoked_tokens.clear()

    def add_user(self, user: AuthUser) -> AuthUser:
        self.users[user.uid] = user
        return user

    def issue_token(self, uid: str) -> str:
        token = f"token-{uid}-{uuid.uuid4().hex[:8]}"
        self.tokens[token] = uid
        return token

    def verify_id_token(self, token: str) -> dict:
        if not token or token.count("-") < 2:
            raise InvalidTokenError(TOKEN_MALFORMED)
        if token in self.expired_tokens:
            raise InvalidTokenError(TOKEN_EXPIRED)
        if token in self.revoked_tokens:
            raise InvalidTokenError(TOKEN_REVOKED)
        uid = self.tokens.get(token)
        if uid is None:
            raise InvalidTokenError(TOKEN_INVALID)
        user = self.users.get(uid) or AuthUser(uid=uid)
        return {
            "uid": uid,
            "email": user.email,
            "phone_number": user.phone_number,
        }

    def get_user(self, uid: str) -> AuthUser:
        user = self.users.get(uid)
        if user is None:
            raise AuthUserNotFoundError(uid)
        return user

    def create_user(
        self,
        phone_number: Optional[str] = None,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> AuthUser:
        for existing in self.users.values():
            if phone_number and existing.phone_number == phone_number:
                raise AuthUserExistsError("phone number")
            if email and existing.email == email:
                raise AuthUserExistsError("email")
        user = AuthUser(
            uid=uuid.uuid4().hex[:28],
            email=email,
            phone_number=phone_number,
            display_name=display_name,
        )
        return self.add_user(user)

    def create_custom_token(self, uid: str) -> str:
        return f"custom-{uid}"
