"""User model."""

from sqlalchemy import Column, Integer, String, Text

from notecanvas.database import Base
from notecanvas.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and workspace ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lowercased
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    bio = Column(Text, nullable=False, default="")
    banner = Column(Text, nullable=False, default="")
    avatar = Column(Text, nullable=False, default="")
    encrypted_api_key = Column(Text, nullable=True)  # Fernet token, never the raw key

    @property
    def has_api_key(self) -> bool:
        """Check if the user has stored a third-party API key."""
        return bool(self.encrypted_api_key)
