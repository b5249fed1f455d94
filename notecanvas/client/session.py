"""Local identity cache: the signed-in user's token and profile."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass
class StoredSession:
    token: str | None = None
    user: dict[str, Any] | None = None


class SessionCache(Protocol):
    """Where the client keeps its token and cached identity."""

    def load(self) -> StoredSession: ...

    def save(self, token: str, user: dict[str, Any]) -> None: ...

    def save_user(self, user: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...


class MemorySessionCache:
    """Session cache that lives as long as the process."""

    def __init__(self, token: str | None = None, user: dict[str, Any] | None = None) -> None:
        self._session = StoredSession(token=token, user=user)

    def load(self) -> StoredSession:
        return StoredSession(token=self._session.token, user=self._session.user)

    def save(self, token: str, user: dict[str, Any]) -> None:
        self._session = StoredSession(token=token, user=user)

    def save_user(self, user: dict[str, Any]) -> None:
        self._session.user = user

    def clear(self) -> None:
        self._session = StoredSession()


class FileSessionCache:
    """Session cache persisted as a small JSON file (the desktop analogue of localStorage)."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> StoredSession:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return StoredSession()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return StoredSession()
        return StoredSession(token=data.get("token"), user=data.get("user"))

    def save(self, token: str, user: dict[str, Any]) -> None:
        self._write(StoredSession(token=token, user=user))

    def save_user(self, user: dict[str, Any]) -> None:
        session = self.load()
        session.user = user
        self._write(session)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def _write(self, session: StoredSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"token": session.token, "user": session.user}),
            encoding="utf-8",
        )
        self.path.chmod(0o600)
