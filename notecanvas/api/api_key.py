"""API key settings endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from notecanvas.api.dependencies import get_current_user_id
from notecanvas.database import get_db
from notecanvas.schemas.api_key import ApiKeyRequest, ApiKeySaved, ApiKeyStatus
from notecanvas.schemas.base import SuccessResponse
from notecanvas.services.credentials import get_api_key_status, remove_api_key, set_api_key

router = APIRouter(prefix="/api/settings/api-key", tags=["settings"])


@router.get("", response_model=ApiKeyStatus)
async def api_key_status(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[Session, Depends(get_db)],
):
    """Report whether the user has a stored key, masked."""
    has_key, masked_key = get_api_key_status(db, user_id)
    return ApiKeyStatus(has_key=has_key, masked_key=masked_key)


@router.post("", response_model=ApiKeySaved)
async def save_api_key(
    request: ApiKeyRequest,
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[Session, Depends(get_db)],
):
    """Save or replace the user's key."""
    masked_key = set_api_key(db, user_id, request.api_key)
    return ApiKeySaved(masked_key=masked_key)


@router.delete("", response_model=SuccessResponse)
async def delete_api_key(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[Session, Depends(get_db)],
):
    """Remove the user's key."""
    remove_api_key(db, user_id)
    return SuccessResponse()
