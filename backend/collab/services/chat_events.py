"""Posts proposal and milestone events into the project chat."""

from __future__ import annotations

from collab.interfaces.chat_repository import IChatRepository
from collab.models.chat import ChatMessage, ChatMessageCreate, ChatMessageKind
from collab.models.milestone import Milestone
from collab.models.proposal import MilestoneProposal


async def post_proposal(
    chat_repo: IChatRepository,
    proposal: MilestoneProposal,
) -> ChatMessage:
    amount = f" for {proposal.amount:g}" if proposal.amount else ""
    return await chat_repo.post(ChatMessageCreate(
        project_id=proposal.project_id,
        sender_id=proposal.proposer_id,
        kind=ChatMessageKind.PROPOSAL,
        content=f"Proposed milestone \"{proposal.title}\"{amount}, due {proposal.due_date.date().isoformat()}",
        reference_id=str(proposal.id),
    ))


async def post_proposal_accepted(
    chat_repo: IChatRepository,
    proposal: MilestoneProposal,
    actor_user_id: str,
) -> ChatMessage:
    return await chat_repo.post(ChatMessageCreate(
        project_id=proposal.project_id,
        sender_id=actor_user_id,
        kind=ChatMessageKind.PROPOSAL_ACCEPTED,
        content=f"Accepted proposal \"{proposal.title}\"",
        reference_id=str(proposal.id),
    ))


async def post_proposal_finalized(
    chat_repo: IChatRepository,
    milestone: Milestone,
    actor_user_id: str,
) -> ChatMessage:
    return await chat_repo.post(ChatMessageCreate(
        project_id=milestone.project_id,
        sender_id=actor_user_id,
        kind=ChatMessageKind.PROPOSAL_FINALIZED,
        content=f"Finalized milestone \"{milestone.title}\"",
        reference_id=str(milestone.id),
    ))


async def post_milestone_event(
    chat_repo: IChatRepository,
    milestone: Milestone,
    actor_user_id: str,
    event: str,
) -> ChatMessage:
    """Generic status line, e.g. ``"moved to PARTNER_REVIEW"``."""
    return await chat_repo.post(ChatMessageCreate(
        project_id=milestone.project_id,
        sender_id=actor_user_id,
        kind=ChatMessageKind.MILESTONE_EVENT,
        content=f"\"{milestone.title}\" {event}",
        reference_id=str(milestone.id),
    ))
