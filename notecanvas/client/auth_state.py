"""Client authentication state machine.

    checking ──verify ok / cached identity──▶ authenticated ──logout──▶ anonymous
        │                                         ▲
        └──no token / definitive rejection──▶ anonymous ──sign in / sign up──┘

A transient failure while verifying never logs the user out as long as a
token is still cached.
"""

import logging
from enum import Enum
from typing import Any

from notecanvas.client.api import CanvasApiClient
from notecanvas.exceptions import AppError, AuthError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AppView(str, Enum):
    LANDING = "landing"
    SIGNIN = "signin"
    SIGNUP = "signup"
    APP = "app"


ANONYMOUS_VIEWS = frozenset({AppView.LANDING, AppView.SIGNIN, AppView.SIGNUP})

# Verification failures that prove the session is gone
DEFINITIVE_FAILURES = (AuthError, NotFoundError)


class AuthController:
    """Owns the session state for one client."""

    def __init__(self, api: CanvasApiClient) -> None:
        self.api = api
        self.state = AuthState.CHECKING
        self.view = AppView.LANDING
        self.user: dict[str, Any] | None = None
        self.verified = False

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    async def bootstrap(self) -> AuthState:
        """Render from the cached identity at once, then confirm it with the server."""
        cached = self.api.session.load()
        if not cached.token:
            self._become_anonymous(AppView.LANDING)
            return self.state

        if cached.user is not None:
            self._become_authenticated(cached.user, verified=False)

        try:
            user = await self.api.verify()
        except DEFINITIVE_FAILURES as e:
            logger.info(f"Cached session rejected: {e.message}")
            self.api.logout()
            self._become_anonymous(AppView.LANDING)
        except AppError as e:
            # Ambiguous (network or server) failure: stay signed in
            logger.warning(f"Could not verify session, keeping cached identity: {e.message}")
            self._become_authenticated(cached.user, verified=False)
        else:
            self._become_authenticated(user, verified=True)
        return self.state

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        user = await self.api.sign_in(email, password)
        self._become_authenticated(user, verified=True)
        return user

    async def sign_up(self, email: str, password: str, name: str) -> dict[str, Any]:
        user = await self.api.sign_up(email, password, name)
        self._become_authenticated(user, verified=True)
        return user

    def logout(self) -> None:
        self.api.logout()
        self._become_anonymous(AppView.LANDING)

    def navigate(self, view: AppView) -> None:
        """Move between views allowed in the current state."""
        allowed = {AppView.APP} if self.is_authenticated else ANONYMOUS_VIEWS
        if view not in allowed:
            raise ValidationError(f"Cannot open {view.value} while {self.state.value}", field="view")
        self.view = view

    def _become_authenticated(self, user: dict[str, Any] | None, verified: bool) -> None:
        if self.state != AuthState.AUTHENTICATED:
            logger.info("Session authenticated")
        self.state = AuthState.AUTHENTICATED
        self.view = AppView.APP
        self.user = user
        self.verified = verified

    def _become_anonymous(self, view: AppView) -> None:
        if self.state == AuthState.AUTHENTICATED:
            logger.info("Session ended")
        self.state = AuthState.ANONYMOUS
        self.view = view
        self.user = None
        self.verified = False
