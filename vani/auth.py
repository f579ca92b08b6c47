"""
Account endpoints backed by Supabase Auth.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from supabase import AuthError, Client

from .database import create_supabase_client
from .middleware.rate_limiter import enforce_rate_limit
from .middleware.validator import validate_login_request, validate_signup_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(enforce_rate_limit)])


class SignupRequest(BaseModel):
    email: str
    password: str
    displayName: str


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    userId: str
    accessToken: Optional[str] = None
    refreshToken: Optional[str] = None


class OAuthResponse(BaseModel):
    url: str


def _session_response(auth_response) -> SessionResponse:
    session = auth_response.session
    return SessionResponse(
        userId=auth_response.user.id,
        accessToken=session.access_token if session else None,
        refreshToken=session.refresh_token if session else None,
    )


@router.post("/signup", response_model=SessionResponse)
def signup(body: SignupRequest, client: Client = Depends(create_supabase_client)):
    """
    Create an account. The display name is stored in user metadata, where
    the database trigger picks it up for the profile row.

    Tokens are absent while email confirmation is pending.
    """
    validation = validate_signup_request(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    try:
        response = client.auth.sign_up({
            "email": body.email,
            "password": body.password,
            "options": {"data": {"display_name": body.displayName.strip()}},
        })
    except AuthError as e:
        logger.warning(f"Sign up failed for {body.email}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    if response.user is None:
        raise HTTPException(status_code=400, detail="Sign up failed")

    logger.info(f"New account: {response.user.id}")
    return _session_response(response)


@router.post("/login", response_model=SessionResponse)
def login(body: LoginRequest, client: Client = Depends(create_supabase_client)):
    """Sign in with email and password."""
    validation = validate_login_request(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    try:
        response = client.auth.sign_in_with_password({"email": body.email, "password": body.password})
    except AuthError as e:
        logger.warning(f"Sign in failed for {body.email}: {e}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return _session_response(response)


@router.get("/google", response_model=OAuthResponse)
def google_sign_in(redirectTo: Optional[str] = None, client: Client = Depends(create_supabase_client)):
    """URL that starts the Google OAuth flow."""
    options = {"redirect_to": redirectTo} if redirectTo else {}
    response = client.auth.sign_in_with_oauth({"provider": "google", "options": options})
    return OAuthResponse(url=response.url)
