"""
Notification helper functions for proposal and milestone events.

Each function picks the recipients for one event and drops the acting user.
"""

from __future__ import annotations

from typing import Iterable, Optional

from collab.interfaces.notification_repository import INotificationRepository
from collab.models.milestone import Milestone
from collab.models.notification import NotificationCreate, NotificationType
from collab.models.proposal import MilestoneProposal


async def _notify(
    notification_repo: INotificationRepository,
    recipients: Iterable[Optional[str]],
    actor_user_id: str,
    notification_type: NotificationType,
    title: str,
    message: str,
    link_type: str,
    link_id: str,
    project_id: str,
) -> int:
    targets = sorted({uid for uid in recipients if uid} - {actor_user_id})
    if not targets:
        return 0

    notifications = [
        NotificationCreate(
            user_id=uid,
            type=notification_type,
            title=title,
            message=message,
            link_type=link_type,
            link_id=link_id,
            project_id=project_id,
        )
        for uid in targets
    ]
    await notification_repo.create_bulk(notifications)
    return len(notifications)


async def notify_proposal_accepted(
    notification_repo: INotificationRepository,
    proposal: MilestoneProposal,
    actor_user_id: str,
) -> int:
    """Tell the proposer their terms were accepted."""
    return await _notify(
        notification_repo,
        [proposal.proposer_id],
        actor_user_id,
        NotificationType.PROPOSAL_ACCEPTED,
        "Proposal accepted",
        f"\"{proposal.title}\" was accepted and can now be finalized",
        "proposal",
        str(proposal.id),
        proposal.project_id,
    )


async def notify_proposal_finalized(
    notification_repo: INotificationRepository,
    proposal: MilestoneProposal,
    milestone: Milestone,
    actor_user_id: str,
) -> int:
    """Tell both negotiating parties the milestone exists."""
    return await _notify(
        notification_repo,
        [proposal.proposer_id, proposal.accepted_by],
        actor_user_id,
        NotificationType.PROPOSAL_FINALIZED,
        "Milestone created",
        f"\"{milestone.title}\" was finalized for {milestone.amount:g} {milestone.currency}",
        "milestone",
        str(milestone.id),
        milestone.project_id,
    )


async def notify_escrow_funded(
    notification_repo: INotificationRepository,
    milestone: Milestone,
    recipients: Iterable[Optional[str]],
    actor_user_id: str,
) -> int:
    return await _notify(
        notification_repo,
        recipients,
        actor_user_id,
        NotificationType.ESCROW_FUNDED,
        "Escrow funded",
        f"Work on \"{milestone.title}\" can start",
        "milestone",
        str(milestone.id),
        milestone.project_id,
    )


async def notify_milestone_submitted(
    notification_repo: INotificationRepository,
    milestone: Milestone,
    actor_user_id: str,
) -> int:
    return await _notify(
        notification_repo,
        [milestone.finalized_by],
        actor_user_id,
        NotificationType.MILESTONE_SUBMITTED,
        "Work submitted",
        f"Work was submitted for \"{milestone.title}\"",
        "milestone",
        str(milestone.id),
        milestone.project_id,
    )


async def notify_milestone_approved(
    notification_repo: INotificationRepository,
    milestone: Milestone,
    actor_user_id: str,
) -> int:
    """Supervisor approved; the partner can review."""
    return await _notify(
        notification_repo,
        [milestone.finalized_by],
        actor_user_id,
        NotificationType.MILESTONE_APPROVED,
        "Ready for partner review",
        f"\"{milestone.title}\" was approved by the supervisor",
        "milestone",
        str(milestone.id),
        milestone.project_id,
    )


async def notify_changes_requested(
    notification_repo: INotificationRepository,
    milestone: Milestone,
    submitter_ids: Iterable[Optional[str]],
    actor_user_id: str,
) -> int:
    return await _notify(
        notification_repo,
        submitter_ids,
        actor_user_id,
        NotificationType.CHANGES_REQUESTED,
        "Changes requested",
        f"Changes were requested on \"{milestone.title}\"",
        "milestone",
        str(milestone.id),
        milestone.project_id,
    )


async def notify_milestone_released(
    notification_repo: INotificationRepository,
    milestone: Milestone,
    student_ids: Iterable[Optional[str]],
    actor_user_id: str,
) -> int:
    return await _notify(
        notification_repo,
        student_ids,
        actor_user_id,
        NotificationType.MILESTONE_RELEASED,
        "Payment released",
        f"Payment for \"{milestone.title}\" was released",
        "milestone",
        str(milestone.id),
        milestone.project_id,
    )


async def notify_milestone_completed(
    notification_repo: INotificationRepository,
    milestone: Milestone,
    student_ids: Iterable[Optional[str]],
    actor_user_id: str,
) -> int:
    return await _notify(
        notification_repo,
        student_ids,
        actor_user_id,
        NotificationType.MILESTONE_COMPLETED,
        "Milestone completed",
        f"\"{milestone.title}\" was marked as complete",
        "milestone",
        str(milestone.id),
        milestone.project_id,
    )
