"""
Milestone proposal models.

A proposal is a draft milestone term sheet negotiated in the project chat.
Input models are deliberately loose; ``ProposalLifecycle`` validates them so
errors name the first offending field in a fixed order.
"""

from datetime import date, datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import Field

from collab.models.base import CollabModel
from collab.models.enums import ProposalStatus

DateInput = Union[datetime, date, str]


class MilestoneProposalCreate(CollabModel):
    """Payload for creating a proposal."""

    project_id: Optional[str] = None
    proposer_id: Optional[str] = None
    title: Optional[str] = None
    scope: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    due_date: Optional[DateInput] = None
    amount: Optional[float] = None


class MilestoneProposalUpdate(CollabModel):
    """Amendment of proposal terms before finalization."""

    title: Optional[str] = None
    scope: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    due_date: Optional[DateInput] = None
    amount: Optional[float] = None


class MilestoneProposal(CollabModel):
    """Stored proposal."""

    id: UUID
    project_id: str
    proposer_id: str
    title: str
    scope: str
    acceptance_criteria: str
    due_date: datetime
    amount: Optional[float] = None
    status: ProposalStatus = ProposalStatus.PROPOSED
    version: int = Field(1, ge=1, description="Optimistic concurrency token")
    accepted_by: Optional[str] = None
    accepted_at: Optional[datetime] = None
    finalized_by: Optional[str] = None
    finalized_at: Optional[datetime] = None
    milestone_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
