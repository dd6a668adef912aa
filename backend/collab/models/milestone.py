"""
Milestone model definitions.

Milestones are committed, escrow-backed units of work materialized from a
finalized proposal.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from collab.models.base import CollabModel, unwrap_option_value
from collab.models.enums import EscrowStatus, MilestoneStatus


class MilestoneCreate(CollabModel):
    """Fields copied from the finalized proposal."""

    project_id: str
    source_proposal_id: Optional[UUID] = None
    title: str
    scope: str
    acceptance_criteria: str
    due_date: datetime
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    currency: str = "USD"
    escrow_status: EscrowStatus = EscrowStatus.PENDING
    supervisor_gate: bool = False
    status: MilestoneStatus = MilestoneStatus.FINALIZED
    finalized_by: Optional[str] = None


class MilestoneUpdate(CollabModel):
    """Partial update applied by the lifecycle service."""

    status: Optional[MilestoneStatus] = None
    escrow_status: Optional[EscrowStatus] = None
    supervisor_gate: Optional[bool] = None
    review_notes: Optional[str] = None
    progress_readiness: Optional[int] = None


class Milestone(CollabModel):
    """Complete milestone model."""

    id: UUID
    project_id: str
    source_proposal_id: Optional[UUID] = None
    title: str
    scope: str
    acceptance_criteria: str
    due_date: datetime
    amount: float
    currency: str = "USD"
    escrow_status: EscrowStatus = EscrowStatus.PENDING
    supervisor_gate: bool = False
    status: MilestoneStatus = MilestoneStatus.FINALIZED
    finalized_by: Optional[str] = None
    review_notes: Optional[str] = None
    progress_readiness: Optional[int] = None
    version: int = 1
    created_at: datetime
    updated_at: datetime


# ===========================================
# Request bodies
# ===========================================


class EscrowStatusUpdate(CollabModel):
    """Escrow signal from the funding collaborator."""

    escrow_status: EscrowStatus

    @field_validator("escrow_status", mode="before")
    @classmethod
    def _unwrap(cls, value):
        return unwrap_option_value(value)


class MilestoneStatusUpdate(CollabModel):
    """Generic guarded status change."""

    status: MilestoneStatus

    @field_validator("status", mode="before")
    @classmethod
    def _unwrap(cls, value):
        return unwrap_option_value(value)


class SupervisorApproval(CollabModel):
    """Supervisor approval of a submission."""

    notes: Optional[str] = None
    progress_readiness: int = 100


class ChangeRequest(CollabModel):
    """Request for changes from the supervisor or the partner."""

    notes: Optional[str] = None


class ReleaseRequest(CollabModel):
    """Partner release; portfolio details for the delivering students."""

    student_ids: list[str] = Field(default_factory=list)
    role: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)


class MilestonePermissions(CollabModel):
    """Actions the acting user may take on a milestone."""

    can_edit: bool = False
    can_add: bool = False
    can_approve_and_release: bool = False
    can_disapprove: bool = False
    can_request_changes: bool = False
    can_fund_escrow: bool = False
    can_submit: bool = False
    can_dispute: bool = False
    can_mark_as_complete: bool = False
    can_unmark_as_complete: bool = False
