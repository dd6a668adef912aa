"""Project chat messages carrying proposal and milestone events."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from collab.models.base import CollabModel


class ChatMessageKind(str, Enum):
    """What a chat message represents."""

    TEXT = "text"
    PROPOSAL = "proposal"
    PROPOSAL_ACCEPTED = "proposal_accepted"
    PROPOSAL_FINALIZED = "proposal_finalized"
    MILESTONE_EVENT = "milestone_event"


class ChatMessageCreate(CollabModel):
    project_id: str
    sender_id: str
    kind: ChatMessageKind = ChatMessageKind.TEXT
    content: str
    reference_id: Optional[str] = None


class ChatMessage(ChatMessageCreate):
    id: UUID
    created_at: datetime
