"""Workspace store: per-user workspace documents.

Every read and write is scoped by ``(workspace_id, user_id)``. A workspace owned
by someone else is reported as missing, never as forbidden.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notecanvas.exceptions import NotFoundError, StorageError, ValidationError
from notecanvas.models.workspace import Workspace
from notecanvas.schemas.workspace import DEFAULT_ICON

logger = logging.getLogger(__name__)

GREETING = "New workspace ready. Add notes or ask anything."

UPDATABLE_FIELDS = frozenset(
    {"name", "icon", "blocks", "chat_history", "breakdown", "visualizations", "flashcards"}
)


def greeting_message(now: datetime) -> dict[str, Any]:
    """The single model message every new workspace starts with."""
    timestamp = int(now.timestamp() * 1000)
    return {
        "id": f"{timestamp}-greet",
        "role": "model",
        "content": GREETING,
        "timestamp": timestamp,
    }


class WorkspaceStore:
    """Scoped CRUD over workspace documents."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: int) -> list[Workspace]:
        """All of a user's workspaces, most recently active first."""
        try:
            return (
                self.db.query(Workspace)
                .filter(Workspace.user_id == user_id)
                .order_by(Workspace.last_active.desc(), Workspace.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("list workspaces", e) from e

    def count_for_user(self, user_id: int) -> int:
        """Number of workspaces a user owns."""
        try:
            return self.db.query(Workspace).filter(Workspace.user_id == user_id).count()
        except SQLAlchemyError as e:
            raise self._storage_error("count workspaces", e) from e

    def create(self, user_id: int, name: str, icon: str | None = None) -> Workspace:
        """Create a workspace seeded with no blocks and one greeting message."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Workspace name is required", field="name")

        now = datetime.now(UTC)
        workspace = Workspace(
            user_id=user_id,
            name=name,
            icon=icon or DEFAULT_ICON,
            last_active=now,
            blocks=[],
            chat_history=[greeting_message(now)],
            breakdown=None,
            visualizations=[],
            flashcards=[],
        )
        self.db.add(workspace)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("create workspace", e) from e
        self.db.refresh(workspace)

        logger.info(f"Created workspace {workspace.id} for user {user_id}")
        return workspace

    def get(self, workspace_id: int, user_id: int) -> Workspace:
        """Scoped lookup."""
        try:
            workspace = (
                self.db.query(Workspace)
                .filter(Workspace.id == workspace_id, Workspace.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._storage_error("load workspace", e) from e

        if workspace is None:
            raise NotFoundError("Workspace not found")
        return workspace

    def update(self, workspace_id: int, user_id: int, fields: dict[str, Any]) -> Workspace:
        """Overwrite only the supplied fields and refresh ``last_active``.

        The ownership filter and the write are a single UPDATE statement, so a
        write can never land on another user's workspace.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown workspace field: {sorted(unknown)[0]}")
        if "name" in fields and not (fields["name"] or "").strip():
            raise ValidationError("Workspace name is required", field="name")

        values = {getattr(Workspace, key): value for key, value in fields.items()}
        values[Workspace.last_active] = datetime.now(UTC)

        try:
            updated = (
                self.db.query(Workspace)
                .filter(Workspace.id == workspace_id, Workspace.user_id == user_id)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("update workspace", e) from e

        if updated == 0:
            raise NotFoundError("Workspace not found")
        self.db.expire_all()
        return self.get(workspace_id, user_id)

    def delete(self, workspace_id: int, user_id: int) -> None:
        """Scoped delete. Keeping at least one workspace is the caller's policy."""
        try:
            deleted = (
                self.db.query(Workspace)
                .filter(Workspace.id == workspace_id, Workspace.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("delete workspace", e) from e

        if deleted == 0:
            raise NotFoundError("Workspace not found")
        logger.info(f"Deleted workspace {workspace_id} for user {user_id}")

    def _storage_error(self, action: str, error: SQLAlchemyError) -> StorageError:
        self.db.rollback()
        logger.error(f"Failed to {action}: {error}")
        return StorageError()
