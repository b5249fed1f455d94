"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from notecanvas.api.dependencies import get_current_user_id
from notecanvas.database import get_db
from notecanvas.schemas.auth import AuthResponse, UserEnvelope, UserResponse, UserSignIn, UserSignUp
from notecanvas.services.auth import create_access_token
from notecanvas.services.credentials import authenticate_user, create_user, get_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse)
async def signup(
    user_data: UserSignUp,
    db: Annotated[Session, Depends(get_db)],
):
    """Create an account and sign it in."""
    user = create_user(db, user_data.email, user_data.password, user_data.name)
    token = create_access_token(user.id, user.email)

    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/signin", response_model=AuthResponse)
async def signin(
    credentials: UserSignIn,
    db: Annotated[Session, Depends(get_db)],
):
    """Sign in with email and password."""
    user = authenticate_user(db, credentials.email, credentials.password)
    token = create_access_token(user.id, user.email)

    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/verify", response_model=UserEnvelope)
async def verify(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[Session, Depends(get_db)],
):
    """Check a token and return the current profile."""
    user = get_user(db, user_id)
    return UserEnvelope(user=UserResponse.model_validate(user))
