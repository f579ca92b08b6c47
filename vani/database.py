"""
Supabase access for profile and practice-session data.

Every authenticated request gets its own client carrying the caller's JWT,
so Postgres row-level security decides what the caller can read and write.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, Header, HTTPException
from supabase import AuthError, Client, create_client

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
SESSIONS_TABLE = "practice_sessions"


@dataclass
class CurrentUser:
    """The authenticated caller and a client scoped to their token."""
    id: str
    email: Optional[str]
    client: Client


def create_supabase_client() -> Client:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_ANON_KEY")
    if not url or not key:
        logger.error("SUPABASE_URL / SUPABASE_ANON_KEY not configured")
        raise HTTPException(status_code=500, detail="Service not configured")
    return create_client(url, key)


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the JWT from an Authorization header or fail with 401."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Authorization header must be a Bearer token")
    return token.strip()


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(create_supabase_client),
) -> CurrentUser:
    """FastAPI dependency resolving the caller from their Supabase JWT."""
    token = bearer_token(authorization)

    try:
        response = client.auth.get_user(token)
    except AuthError as e:
        logger.warning(f"Rejected token: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if response is None or response.user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    client.postgrest.auth(token)
    return CurrentUser(id=response.user.id, email=response.user.email, client=client)
