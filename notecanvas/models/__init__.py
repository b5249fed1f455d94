"""SQLAlchemy models."""

from notecanvas.models.user import User
from notecanvas.models.workspace import Workspace

__all__ = [
    "User",
    "Workspace",
]
