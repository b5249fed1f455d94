"""Workspace schemas.

Blocks are a tagged union discriminated by ``type``; each variant only carries
the fields that make sense for it.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import ConfigDict, Field

from notecanvas.schemas.base import CamelModel

DEFAULT_ICON = "layers"


class BlockType(str, Enum):
    """Kinds of canvas block."""

    TEXT = "text"
    IMAGE = "image"
    DATASET = "dataset"


class TextBlock(CamelModel):
    """A free-form note."""

    id: str = Field(..., min_length=1)
    type: Literal["text"] = "text"
    title: str = ""
    content: str = ""


class ImageBlock(CamelModel):
    """An image (data URL or remote URL) with an optional vision analysis."""

    id: str = Field(..., min_length=1)
    type: Literal["image"] = "image"
    title: str = ""
    src: str
    mime_type: str
    analysis: str | None = None


class DatasetBlock(CamelModel):
    """Descriptor of an uploaded tabular dataset."""

    id: str = Field(..., min_length=1)
    type: Literal["dataset"] = "dataset"
    title: str = ""
    file_name: str
    row_count: int = Field(0, ge=0)
    columns: list[str] = Field(default_factory=list)
    description: str | None = None


Block = Annotated[TextBlock | ImageBlock | DatasetBlock, Field(discriminator="type")]


class Message(CamelModel):
    """A chat turn. ``timestamp`` is epoch milliseconds."""

    id: str
    role: Literal["user", "model"]
    content: str
    timestamp: int


class BreakdownData(CamelModel):
    """Structured summary derived from a text block."""

    summary: str
    key_points: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class ChartDataPoint(CamelModel):
    """One data point; extra series keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    name: str
    value: float


class ChartConfig(CamelModel):
    """A recommended chart."""

    type: Literal["bar", "line", "pie", "area"]
    title: str
    data: list[ChartDataPoint] = Field(default_factory=list)
    x_axis_key: str = "name"
    data_key: str = "value"


class Flashcard(CamelModel):
    """A study card."""

    id: str
    front: str
    back: str


class WorkspaceCreate(CamelModel):
    """Create a new workspace."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    icon: str | None = Field(None, max_length=50)


class WorkspaceUpdate(CamelModel):
    """Sparse workspace patch: only supplied fields are written."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: int
    name: str | None = Field(None, min_length=1, max_length=255)
    icon: str | None = Field(None, max_length=50)
    blocks: list[Block] | None = None
    chat_history: list[Message] | None = None
    breakdown: BreakdownData | None = None
    visualizations: list[ChartConfig] | None = None
    flashcards: list[Flashcard] | None = None


class WorkspaceResponse(CamelModel):
    """Full workspace document."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    icon: str
    last_active: datetime
    blocks: list[Block] = Field(default_factory=list)
    chat_history: list[Message] = Field(default_factory=list)
    breakdown: BreakdownData | None = None
    visualizations: list[ChartConfig] = Field(default_factory=list)
    flashcards: list[Flashcard] = Field(default_factory=list)
    created_at: datetime | None = None


class WorkspaceEnvelope(CamelModel):
    """Single workspace response."""

    success: bool = True
    workspace: WorkspaceResponse


class WorkspaceListResponse(CamelModel):
    """All of a user's workspaces, most recently active first."""

    success: bool = True
    workspaces: list[WorkspaceResponse]
