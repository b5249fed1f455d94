"""HTTP client for the notecanvas API (auth, settings, workspace sync, completion)."""

import logging
from typing import Any

import httpx

from notecanvas.client.session import MemorySessionCache, SessionCache
from notecanvas.config import get_settings
from notecanvas.exceptions import AuthError, ConnectivityError, error_for_status

logger = logging.getLogger(__name__)


class CanvasApiClient:
    """Authenticated calls to the API.

    Successful sign-in/sign-up caches the token and user in ``session``; a
    definitive 401 from verification clears it.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: SessionCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.session = session or MemorySessionCache()
        self._client = httpx.AsyncClient(
            base_url=base_url or get_settings().api_base_url,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "CanvasApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        token = self.session.load().token
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._auth_headers(),
            )
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} could not reach the server: {e}")
            raise ConnectivityError() from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise error_for_status(response.status_code, message)
        return data

    # Auth

    async def sign_up(self, email: str, password: str, name: str) -> dict[str, Any]:
        """Create an account; caches the returned token and user."""
        data = await self._request(
            "POST", "/api/auth/signup", json={"email": email, "password": password, "name": name}
        )
        self.session.save(data["token"], data["user"])
        return data["user"]

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        """Sign in; caches the returned token and user."""
        data = await self._request(
            "POST", "/api/auth/signin", json={"email": email, "password": password}
        )
        self.session.save(data["token"], data["user"])
        return data["user"]

    async def verify(self) -> dict[str, Any]:
        """Verify the cached token and refresh the cached user with server truth."""
        if not self.session.load().token:
            raise AuthError("No token found")

        try:
            data = await self._request("GET", "/api/auth/verify")
        except AuthError:
            # Token expired or invalid
            self.logout()
            raise

        self.session.save_user(data["user"])
        return data["user"]

    def logout(self) -> None:
        """Forget the token locally. Tokens are stateless; nothing to revoke."""
        self.session.clear()

    async def update_profile(
        self,
        name: str,
        bio: str | None = None,
        banner: str | None = None,
        avatar: str | None = None,
    ) -> dict[str, Any]:
        """Update the profile and the cached user."""
        body = {"name": name, "bio": bio, "banner": banner, "avatar": avatar}
        data = await self._request(
            "POST", "/api/user/update", json={k: v for k, v in body.items() if v is not None}
        )
        self.session.save_user(data["user"])
        return data["user"]

    # Settings

    async def get_api_key_status(self) -> dict[str, Any]:
        return await self._request("GET", "/api/settings/api-key")

    async def set_api_key(self, api_key: str) -> str:
        """Store a provider key; only its masked form comes back."""
        data = await self._request("POST", "/api/settings/api-key", json={"apiKey": api_key})
        return data["maskedKey"]

    async def remove_api_key(self) -> None:
        await self._request("DELETE", "/api/settings/api-key")

    # Workspaces

    async def fetch_workspaces(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/api/workspaces")
        return data["workspaces"]

    async def get_workspace(self, workspace_id: int) -> dict[str, Any]:
        data = await self._request("GET", f"/api/workspaces/{workspace_id}")
        return data["workspace"]

    async def create_workspace(self, name: str, icon: str = "layers") -> dict[str, Any]:
        data = await self._request("POST", "/api/workspaces", json={"name": name, "icon": icon})
        return data["workspace"]

    async def update_workspace(self, workspace_id: int, updates: dict[str, Any]) -> dict[str, Any]:
        """Send a sparse update; ``updates`` uses wire (camelCase) keys."""
        data = await self._request("PUT", "/api/workspaces", json={"id": workspace_id, **updates})
        return data["workspace"]

    async def delete_workspace(self, workspace_id: int) -> None:
        await self._request("DELETE", "/api/workspaces", params={"id": workspace_id})

    # Completion

    async def complete(self, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "POST", "/api/completion", json={"action": action, "payload": payload}
        )
