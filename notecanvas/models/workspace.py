"""Workspace model."""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from notecanvas.database import Base
from notecanvas.models.mixins import TimestampMixin


def utcnow() -> datetime:
    return datetime.now(UTC)


class Workspace(Base, TimestampMixin):
    """A user's canvas: blocks, chat history and derived AI artifacts."""

    __tablename__ = "workspaces"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    icon = Column(String(50), nullable=False, default="layers")
    last_active = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # Document content, stored as JSON in wire (camelCase) form
    blocks = Column(JSON, nullable=False, default=list)
    chat_history = Column(JSON, nullable=False, default=list)
    breakdown = Column(JSON, nullable=True)
    visualizations = Column(JSON, nullable=False, default=list)
    flashcards = Column(JSON, nullable=False, default=list)

    # Relationships
    owner = relationship("User", backref="workspaces")
