"""Pydantic schemas for API requests and responses."""

from notecanvas.schemas.api_key import ApiKeyRequest, ApiKeySaved, ApiKeyStatus
from notecanvas.schemas.auth import (
    AuthResponse,
    ProfileUpdate,
    UserEnvelope,
    UserResponse,
    UserSignIn,
    UserSignUp,
)
from notecanvas.schemas.base import SuccessResponse
from notecanvas.schemas.workspace import (
    Block,
    BlockType,
    BreakdownData,
    ChartConfig,
    DatasetBlock,
    Flashcard,
    ImageBlock,
    Message,
    TextBlock,
    WorkspaceCreate,
    WorkspaceResponse,
    WorkspaceUpdate,
)

__all__ = [
    "UserSignUp",
    "UserSignIn",
    "UserResponse",
    "UserEnvelope",
    "AuthResponse",
    "ProfileUpdate",
    "ApiKeyRequest",
    "ApiKeySaved",
    "ApiKeyStatus",
    "SuccessResponse",
    "Block",
    "BlockType",
    "TextBlock",
    "ImageBlock",
    "DatasetBlock",
    "Message",
    "BreakdownData",
    "ChartConfig",
    "Flashcard",
    "WorkspaceCreate",
    "WorkspaceUpdate",
    "WorkspaceResponse",
]
