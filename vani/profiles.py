"""
Profile endpoints for the signed-in user.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from .database import PROFILES_TABLE, CurrentUser, get_current_user
from .middleware.validator import validate_profile_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["profiles"])


class Profile(BaseModel):
    id: str
    displayName: Optional[str] = None
    avatarUrl: Optional[str] = None


class ProfileUpdate(BaseModel):
    displayName: Optional[str] = None
    avatarUrl: Optional[str] = None


def _to_profile(row: dict) -> Profile:
    return Profile(id=row["id"], displayName=row.get("display_name"), avatarUrl=row.get("avatar_url"))


@router.get("/me", response_model=Profile)
def get_profile(user: CurrentUser = Depends(get_current_user)):
    response = (
        user.client.table(PROFILES_TABLE)
        .select("id, display_name, avatar_url")
        .eq("id", user.id)
        .limit(1)
        .execute()
    )
    if not response.data:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _to_profile(response.data[0])


@router.patch("/me", response_model=Profile)
def update_profile(body: ProfileUpdate, user: CurrentUser = Depends(get_current_user)):
    """Update display name and/or avatar; omitted fields are left alone."""
    if body.displayName is None and body.avatarUrl is None:
        raise HTTPException(status_code=400, detail="Nothing to update")

    validation = validate_profile_update(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    changes = {}
    if body.displayName is not None:
        changes["display_name"] = body.displayName.strip()
    if body.avatarUrl is not None:
        changes["avatar_url"] = body.avatarUrl.strip()

    response = user.client.table(PROFILES_TABLE).update(changes).eq("id", user.id).execute()
    if not response.data:
        raise HTTPException(status_code=404, detail="Profile not found")

    logger.info(f"Profile updated: {user.id} ({', '.join(sorted(changes))})")
    return _to_profile(response.data[0])
