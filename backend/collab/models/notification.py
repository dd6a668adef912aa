"""
Inbox entries raised by proposal and milestone events.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import Field

from collab.models.base import CollabModel


class NotificationType(str, Enum):
    """Event that produced the notification; stored as its string value."""

    PROPOSAL_ACCEPTED = "proposal_accepted"
    PROPOSAL_FINALIZED = "proposal_finalized"
    ESCROW_FUNDED = "escrow_funded"
    MILESTONE_SUBMITTED = "milestone_submitted"
    MILESTONE_APPROVED = "milestone_approved"
    CHANGES_REQUESTED = "changes_requested"
    MILESTONE_RELEASED = "milestone_released"
    MILESTONE_COMPLETED = "milestone_completed"


class Notification(CollabModel):
    """One entry in a user's inbox."""

    id: UUID
    user_id: str = Field(..., description="Recipient user ID")
    type: NotificationType
    title: str = Field(..., max_length=200)
    message: str = Field(..., max_length=500)

    # Navigation
    link_type: Optional[str] = Field(None, description="proposal | milestone")
    link_id: Optional[str] = None

    # Context
    project_id: Optional[str] = None

    # Status
    is_read: bool = False
    read_at: Optional[datetime] = None

    created_at: datetime


class NotificationCreate(CollabModel):
    """Payload written by the notification service; id and timestamps are assigned on insert."""

    user_id: str
    type: NotificationType
    title: str
    message: str
    link_type: Optional[str] = None
    link_id: Optional[str] = None
    project_id: Optional[str] = None
