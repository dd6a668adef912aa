"""
Project chat API endpoints.

Proposal and milestone events land here next to plain text messages.
"""

from fastapi import APIRouter, Query, status

from collab.api.deps import ChatRepo, CurrentActor
from collab.core.exceptions import ValidationError
from collab.models.base import CollabModel
from collab.models.chat import ChatMessage, ChatMessageCreate, ChatMessageKind

router = APIRouter()


class ChatMessageRequest(CollabModel):
    content: str


@router.get("/{project_id}/messages", response_model=list[ChatMessage])
async def list_messages(
    project_id: str,
    actor: CurrentActor,
    chat_repo: ChatRepo,
    limit: int = Query(100, ge=1, le=500),
):
    """List a project's chat, oldest first."""
    return await chat_repo.list_by_project(project_id, limit=limit)


@router.post(
    "/{project_id}/messages",
    response_model=ChatMessage,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    project_id: str,
    request: ChatMessageRequest,
    actor: CurrentActor,
    chat_repo: ChatRepo,
):
    content = request.content.strip()
    if not content:
        raise ValidationError("Message cannot be empty", field="content")
    return await chat_repo.post(ChatMessageCreate(
        project_id=project_id,
        sender_id=actor.id,
        kind=ChatMessageKind.TEXT,
        content=content,
    ))
