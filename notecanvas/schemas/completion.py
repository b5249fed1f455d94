"""Completion service schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from notecanvas.schemas.base import CamelModel


class CompletionRequest(BaseModel):
    """Envelope sent by the client: an action name and its payload."""

    action: str
    payload: dict[str, Any] = Field(default_factory=dict)


class AnalyzeTextPayload(CamelModel):
    text: str = Field(..., min_length=1)


class AnalyzeImagePayload(CamelModel):
    base64_data: str = Field(..., min_length=1)
    mime_type: str = "image/png"
    prompt: str = "Describe this image in detail and extract any visible text."


class ChartRecommendationPayload(CamelModel):
    dataset_description: str = "Generic dataset"


class ChatTurn(CamelModel):
    role: Literal["user", "model"]
    content: str


class ChatPayload(CamelModel):
    history: list[ChatTurn] = Field(default_factory=list)
    new_message: str = Field(..., min_length=1)
    context: str = ""
