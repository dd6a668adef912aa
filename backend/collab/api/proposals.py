"""
Milestone proposal API endpoints.

Proposals are negotiated in the project chat: proposed, accepted by the
students, then finalized by the partner into a milestone.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from collab.api.deps import ChatRepo, CurrentActor, NotificationRepo, Proposals
from collab.core.exceptions import ForbiddenError
from collab.interfaces.auth_provider import Actor
from collab.models.enums import UserRole
from collab.models.milestone import Milestone
from collab.models.proposal import (
    MilestoneProposal,
    MilestoneProposalCreate,
    MilestoneProposalUpdate,
)
from collab.services import chat_events
from collab.services import notification_service as notify
from collab.services.milestone_permissions import PARTNER_ROLES, STUDENT_ROLES, ensure_role

router = APIRouter()


def _ensure_proposer(actor: Actor, proposal: MilestoneProposal) -> None:
    if actor.role != UserRole.SUPER_ADMIN and proposal.proposer_id != actor.id:
        raise ForbiddenError("Only the proposer can change this proposal")


@router.post("", response_model=MilestoneProposal, status_code=status.HTTP_201_CREATED)
async def create_proposal(
    data: MilestoneProposalCreate,
    actor: CurrentActor,
    proposals: Proposals,
    chat_repo: ChatRepo,
):
    """Propose milestone terms in a project chat."""
    if not data.proposer_id:
        data = data.model_copy(update={"proposer_id": actor.id})
    proposal = await proposals.create_proposal(data)
    await chat_events.post_proposal(chat_repo, proposal)
    return proposal


@router.get("", response_model=list[MilestoneProposal])
async def list_proposals(
    actor: CurrentActor,
    proposals: Proposals,
    project_id: str = Query(..., alias="projectId"),
):
    """List a project's proposals, newest first."""
    return await proposals.list_project_proposals(project_id)


@router.get("/{proposal_id}", response_model=MilestoneProposal)
async def get_proposal(proposal_id: UUID, actor: CurrentActor, proposals: Proposals):
    return await proposals.get_proposal(proposal_id)


@router.patch("/{proposal_id}", response_model=MilestoneProposal)
async def update_proposal(
    proposal_id: UUID,
    update: MilestoneProposalUpdate,
    actor: CurrentActor,
    proposals: Proposals,
):
    """Amend terms before finalization."""
    _ensure_proposer(actor, await proposals.get_proposal(proposal_id))
    return await proposals.update_proposal_terms(proposal_id, update)


@router.delete("/{proposal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_proposal(proposal_id: UUID, actor: CurrentActor, proposals: Proposals):
    """Withdraw a proposal nobody has accepted yet."""
    _ensure_proposer(actor, await proposals.get_proposal(proposal_id))
    await proposals.withdraw_proposal(proposal_id)


@router.post("/{proposal_id}/accept", response_model=MilestoneProposal)
async def accept_proposal(
    proposal_id: UUID,
    actor: CurrentActor,
    proposals: Proposals,
    notification_repo: NotificationRepo,
    chat_repo: ChatRepo,
):
    """Students accept the proposed terms."""
    ensure_role(actor.role, STUDENT_ROLES)
    proposal = await proposals.accept_proposal(proposal_id, accepted_by=actor.id)
    await notify.notify_proposal_accepted(notification_repo, proposal, actor.id)
    await chat_events.post_proposal_accepted(chat_repo, proposal, actor.id)
    return proposal


@router.post(
    "/{proposal_id}/finalize",
    response_model=Milestone,
    status_code=status.HTTP_201_CREATED,
)
async def finalize_proposal(
    proposal_id: UUID,
    actor: CurrentActor,
    proposals: Proposals,
    notification_repo: NotificationRepo,
    chat_repo: ChatRepo,
):
    """Partner finalizes an accepted proposal into a milestone."""
    ensure_role(actor.role, PARTNER_ROLES)
    milestone = await proposals.finalize_proposal(proposal_id, finalizer_id=actor.id)
    proposal = await proposals.get_proposal(proposal_id)
    await notify.notify_proposal_finalized(notification_repo, proposal, milestone, actor.id)
    await chat_events.post_proposal_finalized(chat_repo, milestone, actor.id)
    return milestone
