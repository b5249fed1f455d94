"""User profile API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from notecanvas.api.dependencies import get_current_user_id
from notecanvas.database import get_db
from notecanvas.schemas.auth import ProfileUpdate, UserEnvelope, UserResponse
from notecanvas.services.credentials import update_profile

router = APIRouter(prefix="/api/user", tags=["user"])


@router.post("/update", response_model=UserEnvelope)
async def update_user(
    profile: ProfileUpdate,
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update the current user's profile."""
    user = update_profile(
        db,
        user_id,
        profile.name,
        bio=profile.bio,
        banner=profile.banner,
        avatar=profile.avatar,
    )
    return UserEnvelope(user=UserResponse.model_validate(user))
