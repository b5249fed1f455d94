"""Workspace API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic.alias_generators import to_camel

from notecanvas.api.dependencies import get_current_user_id, get_workspace_store
from notecanvas.schemas.base import SuccessResponse
from notecanvas.schemas.workspace import (
    WorkspaceCreate,
    WorkspaceEnvelope,
    WorkspaceListResponse,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from notecanvas.services.workspace_store import UPDATABLE_FIELDS, WorkspaceStore

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])

# Fields where an explicit null is a real value rather than "not supplied"
NULLABLE_FIELDS = {"breakdown"}


def build_patch(update: WorkspaceUpdate) -> dict[str, Any]:
    """Turn a sparse update into store fields holding wire-form JSON."""
    wire = update.model_dump(by_alias=True, mode="json")
    patch = {}
    for field in UPDATABLE_FIELDS & update.model_fields_set:
        value = wire[to_camel(field)]
        if value is None and field not in NULLABLE_FIELDS:
            continue
        patch[field] = value
    return patch


@router.get("", response_model=WorkspaceListResponse)
async def list_workspaces(
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[WorkspaceStore, Depends(get_workspace_store)],
):
    """Get all of the current user's workspaces, most recently active first."""
    workspaces = store.list_for_user(user_id)
    return WorkspaceListResponse(
        workspaces=[WorkspaceResponse.model_validate(ws) for ws in workspaces]
    )


@router.post("", response_model=WorkspaceEnvelope)
async def create_workspace(
    workspace_data: WorkspaceCreate,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[WorkspaceStore, Depends(get_workspace_store)],
):
    """Create a new workspace."""
    workspace = store.create(user_id, workspace_data.name, workspace_data.icon)
    return WorkspaceEnvelope(workspace=WorkspaceResponse.model_validate(workspace))


@router.put("", response_model=WorkspaceEnvelope)
async def update_workspace(
    workspace_data: WorkspaceUpdate,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[WorkspaceStore, Depends(get_workspace_store)],
):
    """Apply a sparse update to one of the current user's workspaces."""
    workspace = store.update(workspace_data.id, user_id, build_patch(workspace_data))
    return WorkspaceEnvelope(workspace=WorkspaceResponse.model_validate(workspace))


@router.delete("", response_model=SuccessResponse)
async def delete_workspace(
    workspace_id: Annotated[int, Query(alias="id")],
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[WorkspaceStore, Depends(get_workspace_store)],
):
    """Delete one of the current user's workspaces."""
    store.delete(workspace_id, user_id)
    return SuccessResponse()


@router.get("/{workspace_id}", response_model=WorkspaceEnvelope)
async def get_workspace(
    workspace_id: int,
    user_id: Annotated[int, Depends(get_current_user_id)],
    store: Annotated[WorkspaceStore, Depends(get_workspace_store)],
):
    """Get a single workspace."""
    workspace = store.get(workspace_id, user_id)
    return WorkspaceEnvelope(workspace=WorkspaceResponse.model_validate(workspace))
