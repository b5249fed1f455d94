"""Workspace controller: the client's single owner of editable workspace state.

Mutations apply to memory immediately and schedule a debounced full-state
save of the affected workspace. Saves that fail for transient reasons are
retried with backoff; when retries run out the workspace stays dirty and the
next save carries its latest state.
"""

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from notecanvas.client.api import CanvasApiClient
from notecanvas.client.content import (
    FLASHCARD_PROMPT,
    build_chat_context,
    build_flashcard_context,
    new_id,
    note_question,
    now_ms,
    parse_flashcards,
)
from notecanvas.client.scheduler import DebouncedScheduler
from notecanvas.config import get_settings
from notecanvas.exceptions import (
    AppError,
    ConnectivityError,
    NotFoundError,
    StorageError,
    UpstreamError,
    ValidationError,
)
from notecanvas.schemas.workspace import (
    DEFAULT_ICON,
    Block,
    BlockType,
    BreakdownData,
    ChartConfig,
    DatasetBlock,
    Flashcard,
    ImageBlock,
    Message,
    TextBlock,
    WorkspaceResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_NAME = "My Workspace"
NO_RESPONSE = "I couldn't generate a response."
KEEP_ONE_WORKSPACE = "Keep at least one workspace."

# Fields sent in full on every auto-save
SAVED_FIELDS = {"name", "icon", "blocks", "chat_history", "breakdown", "visualizations", "flashcards"}

RETRYABLE_ERRORS = (StorageError, UpstreamError, ConnectivityError)


class AgentType(str, Enum):
    STRUCTURER = "structurer"
    VISION = "vision"
    DATA_VIZ = "data_viz"
    FLASHCARDS = "flashcards"


class AgentStatus(str, Enum):
    IDLE = "idle"
    WORKING = "working"
    COMPLETED = "completed"
    ERROR = "error"


def default_block(block_type: BlockType) -> Block:
    """A new block of the given kind with placeholder content."""
    if block_type == BlockType.TEXT:
        return TextBlock(id=new_id(), title="New Note", content="")
    if block_type == BlockType.IMAGE:
        return ImageBlock(
            id=new_id(),
            title="New Image",
            src="https://picsum.photos/400/300",
            mime_type="image/jpeg",
        )
    return DatasetBlock(
        id=new_id(),
        title="New Dataset",
        file_name="data.csv",
        row_count=0,
        columns=[],
        description=None,
    )


class WorkspaceController:
    """Holds every workspace the user has open and keeps them persisted."""

    def __init__(
        self,
        api: CanvasApiClient,
        scheduler: DebouncedScheduler | None = None,
        max_save_attempts: int | None = None,
        retry_wait: wait_base | None = None,
    ) -> None:
        settings = get_settings()
        self.api = api
        self.scheduler = scheduler or DebouncedScheduler(settings.autosave_debounce_seconds)
        self.max_save_attempts = max_save_attempts or settings.autosave_max_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, max=8)

        self._workspaces: dict[int, WorkspaceResponse] = {}
        self._order: list[int] = []
        self.active_id: int | None = None
        self._versions: dict[int, int] = {}
        self.dirty: set[int] = set()
        self.agents: dict[AgentType, AgentStatus] = {agent: AgentStatus.IDLE for agent in AgentType}
        self.agent_messages: dict[AgentType, str] = {}

    # State access

    @property
    def workspaces(self) -> list[WorkspaceResponse]:
        return [self._workspaces[workspace_id] for workspace_id in self._order]

    @property
    def active(self) -> WorkspaceResponse:
        if self.active_id is None:
            raise NotFoundError("No workspace loaded")
        return self._workspaces[self.active_id]

    def get(self, workspace_id: int) -> WorkspaceResponse:
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace not found")
        return workspace

    # Lifecycle

    async def mount(self, preferred_id: int | None = None) -> WorkspaceResponse:
        """Load the user's workspaces, creating a first one when there are none."""
        documents = await self.api.fetch_workspaces()
        if not documents:
            documents = [await self.api.create_workspace(DEFAULT_WORKSPACE_NAME, DEFAULT_ICON)]

        self._workspaces.clear()
        self._order.clear()
        for document in documents:
            self._remember(WorkspaceResponse.model_validate(document))

        self.active_id = preferred_id if preferred_id in self._workspaces else self._order[0]
        return self.active

    async def flush(self) -> None:
        """Persist every pending change now, including saves that gave up earlier."""
        for workspace_id in list(self.dirty):
            if not self.scheduler.is_pending(workspace_id):
                self._schedule_save(workspace_id)
        await self.scheduler.flush_all()

    async def close(self) -> None:
        await self.flush()
        await self.scheduler.aclose()

    # Workspaces

    async def create_workspace(self, name: str, icon: str = DEFAULT_ICON) -> WorkspaceResponse:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Workspace name is required", field="name")

        if self.active_id is not None:
            await self.scheduler.flush(self.active_id)
        workspace = WorkspaceResponse.model_validate(await self.api.create_workspace(name, icon))
        self._remember(workspace, first=True)
        self.active_id = workspace.id
        return workspace

    def rename_workspace(self, workspace_id: int, name: str) -> None:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Workspace name is required", field="name")
        self.get(workspace_id).name = name
        self._touch(workspace_id)

    async def delete_workspace(self, workspace_id: int) -> None:
        """Delete a workspace unless it is the user's last one."""
        self.get(workspace_id)
        if len(self._order) <= 1:
            raise ValidationError(KEEP_ONE_WORKSPACE)

        self.scheduler.cancel(workspace_id)
        await self.api.delete_workspace(workspace_id)

        del self._workspaces[workspace_id]
        self._order.remove(workspace_id)
        self._versions.pop(workspace_id, None)
        self.dirty.discard(workspace_id)
        if self.active_id == workspace_id:
            self.active_id = self._order[0]

    async def switch_workspace(self, workspace_id: int) -> WorkspaceResponse:
        """Make another workspace active, saving the current one's last edit first."""
        self.get(workspace_id)
        if workspace_id != self.active_id and self.active_id is not None:
            await self.scheduler.flush(self.active_id)
        self.active_id = workspace_id
        return self.active

    # Blocks

    def add_block(self, block_type: BlockType | str, **fields: Any) -> Block:
        block = default_block(BlockType(block_type))
        if fields:
            block = self._revise(block, fields)
        self.active.blocks.append(block)
        self._touch(self.active.id)
        return block

    def update_block(self, block_id: str, **changes: Any) -> Block:
        """Edit a block's fields in place (id and type are fixed)."""
        if {"id", "type"} & changes.keys():
            raise ValidationError("Block id and type cannot change")
        blocks = self.active.blocks
        index = self._block_index(block_id)
        blocks[index] = self._revise(blocks[index], changes)
        self._touch(self.active.id)
        return blocks[index]

    def delete_block(self, block_id: str) -> None:
        del self.active.blocks[self._block_index(block_id)]
        self._touch(self.active.id)

    def get_block(self, block_id: str) -> Block:
        return self.active.blocks[self._block_index(block_id)]

    # Chat

    async def send_chat(self, text: str) -> Message | None:
        """Append the user's message, then the model's reply (or an inline error)."""
        if not text or not text.strip():
            return None

        workspace = self.active
        history = [
            {"role": message.role, "content": message.content}
            for message in workspace.chat_history
        ]
        self._append_message(workspace.id, "user", text)

        try:
            result = await self.api.complete(
                "chat",
                {
                    "history": history,
                    "newMessage": text,
                    "context": build_chat_context(workspace.blocks),
                },
            )
            content = result.get("text") or NO_RESPONSE
        except AppError as e:
            logger.warning(f"Chat failed in workspace {workspace.id}: {e.message}")
            content = f"**Error:** {e.message}"

        return self._append_message(workspace.id, "model", content)

    async def ask_about_note(self, block_id: str) -> Message | None:
        block = self._typed_block(block_id, TextBlock)
        return await self.send_chat(note_question(block.title, block.content))

    def pin_message(self, message_id: str) -> TextBlock:
        """Copy a chat message into a new note."""
        message = next((m for m in self.active.chat_history if m.id == message_id), None)
        if message is None:
            raise NotFoundError("Message not found")
        return self._add_note("Pinned message", message.content)

    def save_last_response_to_note(self) -> TextBlock | None:
        last = next((m for m in reversed(self.active.chat_history) if m.role == "model"), None)
        if last is None:
            return None
        return self._add_note("AI Note", last.content)

    # AI artifacts

    async def analyze_text(self, block_id: str) -> BreakdownData | None:
        block = self._typed_block(block_id, TextBlock)
        workspace_id = self.active.id
        self._set_agent(AgentType.STRUCTURER, AgentStatus.WORKING, "Analyzing text structure...")
        try:
            result = await self.api.complete("analyzeText", {"text": block.content})
            breakdown = BreakdownData.model_validate(result)
        except (AppError, ValueError) as e:
            return self._agent_failed(AgentType.STRUCTURER, "Failed to analyze", e)

        self.get(workspace_id).breakdown = breakdown
        self._touch(workspace_id)
        self._set_agent(AgentType.STRUCTURER, AgentStatus.COMPLETED)
        return breakdown

    async def analyze_image(self, block_id: str, prompt: str = "Describe this image.") -> str | None:
        """Run vision analysis on an inline (data URL) image."""
        block = self._typed_block(block_id, ImageBlock)
        workspace_id = self.active.id
        self._set_agent(AgentType.VISION, AgentStatus.WORKING, "Extracting insights...")
        if not block.src.startswith("data:") or "," not in block.src:
            error = ValidationError("Only uploaded images can be analyzed", field="src")
            return self._agent_failed(AgentType.VISION, error.message, error)

        try:
            result = await self.api.complete(
                "analyzeImage",
                {
                    "base64Data": block.src.split(",", 1)[1],
                    "mimeType": block.mime_type,
                    "prompt": prompt,
                },
            )
        except AppError as e:
            return self._agent_failed(AgentType.VISION, "Failed to analyze", e)

        description = result.get("text") or "No analysis generated."
        self._replace_block(workspace_id, block_id, analysis=description)
        self._append_message(workspace_id, "model", f"**Vision Analysis:** {description}")
        self._set_agent(AgentType.VISION, AgentStatus.COMPLETED)
        return description

    async def recommend_chart(self, block_id: str) -> ChartConfig | None:
        block = self._typed_block(block_id, DatasetBlock)
        workspace_id = self.active.id
        self._set_agent(AgentType.DATA_VIZ, AgentStatus.WORKING, "Analyzing metadata...")
        try:
            result = await self.api.complete(
                "chartRecommendation",
                {"datasetDescription": block.description or "Generic dataset"},
            )
            chart = ChartConfig.model_validate(result)
        except (AppError, ValueError) as e:
            return self._agent_failed(AgentType.DATA_VIZ, "Failed to recommend a chart", e)

        self.get(workspace_id).visualizations.insert(0, chart)
        self._touch(workspace_id)
        self._set_agent(AgentType.DATA_VIZ, AgentStatus.COMPLETED)
        return chart

    async def generate_flashcards(self) -> list[Flashcard]:
        workspace = self.active
        context = build_flashcard_context(workspace.blocks, workspace.chat_history)
        self._set_agent(AgentType.FLASHCARDS, AgentStatus.WORKING, "Writing flashcards...")
        try:
            result = await self.api.complete(
                "chat",
                {
                    "history": [],
                    "newMessage": FLASHCARD_PROMPT.format(context=context),
                    "context": context,
                },
            )
        except AppError as e:
            self._agent_failed(AgentType.FLASHCARDS, "Failed to generate flashcards", e)
            return []

        cards = parse_flashcards(result.get("text") or "")
        self.get(workspace.id).flashcards.extend(cards)
        self._touch(workspace.id)
        self._set_agent(AgentType.FLASHCARDS, AgentStatus.COMPLETED)
        return cards

    def delete_flashcard(self, flashcard_id: str) -> None:
        flashcards = self.active.flashcards
        index = next((i for i, card in enumerate(flashcards) if card.id == flashcard_id), None)
        if index is None:
            raise NotFoundError("Flashcard not found")
        del flashcards[index]
        self._touch(self.active.id)

    # Persistence

    def _touch(self, workspace_id: int) -> None:
        """Record a local change and (re)start the save window."""
        self._versions[workspace_id] = self._versions.get(workspace_id, 0) + 1
        self.dirty.add(workspace_id)
        self.get(workspace_id).last_active = datetime.now(UTC)
        self._schedule_save(workspace_id)

    def _schedule_save(self, workspace_id: int) -> None:
        self.scheduler.schedule(workspace_id, lambda: self._persist(workspace_id))

    def snapshot(self, workspace_id: int) -> dict[str, Any]:
        """Full saved state of a workspace in wire form."""
        return self.get(workspace_id).model_dump(by_alias=True, mode="json", include=SAVED_FIELDS)

    async def _persist(self, workspace_id: int) -> None:
        if workspace_id not in self._workspaces:
            return
        version = self._versions.get(workspace_id, 0)
        payload = self.snapshot(workspace_id)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_save_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=True,
            ):
                with attempt:
                    await self.api.update_workspace(workspace_id, payload)
        except AppError as e:
            logger.warning(f"Auto-save of workspace {workspace_id} failed: {e.message}")
            return

        if self._versions.get(workspace_id) == version:
            self.dirty.discard(workspace_id)

    # Helpers

    def _remember(self, workspace: WorkspaceResponse, first: bool = False) -> None:
        self._workspaces[workspace.id] = workspace
        if first:
            self._order.insert(0, workspace.id)
        else:
            self._order.append(workspace.id)

    def _append_message(self, workspace_id: int, role: str, content: str) -> Message:
        message = Message(id=new_id(), role=role, content=content, timestamp=now_ms())
        self.get(workspace_id).chat_history.append(message)
        self._touch(workspace_id)
        return message

    def _add_note(self, title: str, content: str) -> TextBlock:
        return self.add_block(BlockType.TEXT, title=title, content=content)

    def _block_index(self, block_id: str, workspace_id: int | None = None) -> int:
        workspace = self.get(workspace_id) if workspace_id is not None else self.active
        for index, block in enumerate(workspace.blocks):
            if block.id == block_id:
                return index
        raise NotFoundError("Block not found")

    def _typed_block(self, block_id: str, block_cls: type) -> Any:
        block = self.get_block(block_id)
        if not isinstance(block, block_cls):
            raise ValidationError(f"Block {block_id} is not a {block_cls.__name__}")
        return block

    def _replace_block(self, workspace_id: int, block_id: str, **changes: Any) -> None:
        blocks = self.get(workspace_id).blocks
        index = self._block_index(block_id, workspace_id)
        blocks[index] = self._revise(blocks[index], changes)
        self._touch(workspace_id)

    @staticmethod
    def _revise(block: Block, changes: dict[str, Any]) -> Block:
        try:
            return type(block).model_validate({**block.model_dump(), **changes})
        except ValueError as e:
            raise ValidationError(f"Invalid block fields: {e}") from e

    def _set_agent(self, agent: AgentType, status: AgentStatus, message: str = "") -> None:
        self.agents[agent] = status
        self.agent_messages[agent] = message

    def _agent_failed(self, agent: AgentType, message: str, error: Exception) -> None:
        logger.warning(f"{agent.value} agent failed: {error}")
        self._set_agent(agent, AgentStatus.ERROR, message)
        return None
