"""Third-party API key settings schemas."""

from pydantic import Field

from notecanvas.schemas.base import CamelModel


class ApiKeyRequest(CamelModel):
    """Save or replace the user's API key."""

    api_key: str = Field(..., max_length=512)


class ApiKeyStatus(CamelModel):
    """Whether a key is stored, and its masked form."""

    has_key: bool
    masked_key: str = ""


class ApiKeySaved(CamelModel):
    """Result of saving a key."""

    success: bool = True
    message: str = "API key saved successfully"
    masked_key: str
