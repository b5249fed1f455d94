"""FastAPI dependencies for authentication and services."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from notecanvas.database import get_db
from notecanvas.exceptions import AuthError
from notecanvas.services.auth import (
    TokenIdentity,
    extract_token_from_header,
    verify_access_token,
)
from notecanvas.services.workspace_store import WorkspaceStore


def get_token_identity(
    authorization: Annotated[str | None, Header()] = None,
) -> TokenIdentity:
    """Resolve the bearer token to an identity, or fail with 401."""
    token = extract_token_from_header(authorization)
    if token is None:
        raise AuthError("No token provided")

    identity = verify_access_token(token)
    if identity is None:
        raise AuthError("Invalid or expired token")
    return identity


def get_current_user_id(
    identity: Annotated[TokenIdentity, Depends(get_token_identity)],
) -> int:
    """The effective user id of an authenticated request is always the token's."""
    return identity.user_id


def get_workspace_store(
    db: Annotated[Session, Depends(get_db)],
) -> WorkspaceStore:
    """Get workspace store bound to the request's session."""
    return WorkspaceStore(db)
