"""
Sign-up, sign-in and phone verification endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.auth import CurrentUser
from backend.dependencies import get_auth_service, get_current_user
from backend.responses import success
from backend.schemas import SignupRequest
from backend.services.auth import AuthService

router = APIRouter()


@router.post("/signup", status_code=201)
def signup(payload: SignupRequest, service: AuthService = Depends(get_auth_service)):
    result = service.signup(payload.to_document())
    return success(result, message="User created successfully")


@router.post("/signup-email", status_code=201)
def signup_email(
    payload: SignupRequest, service: AuthService = Depends(get_auth_service)
):
    result = service.signup_email(payload.to_document())
    return success(result, message="User created successfully")


@router.post("/signin")
def signin(
    user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return success(service.signin(user.uid), message="Sign in successful")


@router.post("/verify-phone")
def verify_phone(
    user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return success(
        service.verify_phone(user.uid), message="Phone verification successful"
    )


@router.get("/me")
def get_me(
    user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return success(service.get_user_by_uid(user.uid))


@router.post("/refresh-token")
def refresh_token(user: CurrentUser = Depends(get_current_user)):
    # ID tokens are refreshed by the Firebase client SDK.
    return success(message="Token refresh should be handled client-side with Firebase")
