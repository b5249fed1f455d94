"""Completion API endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from notecanvas.api.dependencies import get_current_user_id
from notecanvas.database import get_db
from notecanvas.schemas.completion import CompletionRequest
from notecanvas.services.completion import CompletionService
from notecanvas.services.credentials import get_decrypted_api_key
from notecanvas.services.llm import LLMService

router = APIRouter(prefix="/api/completion", tags=["completion"])


def get_completion_service(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[Session, Depends(get_db)],
) -> CompletionService:
    """Get completion service using the user's own provider key when they have one."""
    return CompletionService(LLMService(api_key=get_decrypted_api_key(db, user_id)))


@router.post("")
async def complete(
    request: CompletionRequest,
    service: Annotated[CompletionService, Depends(get_completion_service)],
) -> dict[str, Any]:
    """Run a completion action over workspace content."""
    return await service.run(request.action, request.payload)
