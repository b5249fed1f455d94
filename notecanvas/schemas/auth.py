"""Authentication and profile schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from notecanvas.schemas.base import CamelModel


class UserSignUp(BaseModel):
    """User sign-up request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)


class UserSignIn(BaseModel):
    """User sign-in request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(CamelModel):
    """Public user profile. Never includes the password hash or API key."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    bio: str = ""
    banner: str = ""
    avatar: str = ""


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    success: bool = True
    token: str
    user: UserResponse


class UserEnvelope(BaseModel):
    """Single user response."""

    success: bool = True
    user: UserResponse


class ProfileUpdate(BaseModel):
    """Profile update request. Only supplied optional fields are changed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    bio: str | None = Field(None, max_length=2000)
    banner: str | None = None
    avatar: str | None = None
