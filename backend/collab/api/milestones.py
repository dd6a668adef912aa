"""
Milestone API endpoints.

Escrow, work, submission, supervisor review and partner review actions on
finalized milestones.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Query, status

from collab.api.deps import (
    ChatRepo,
    CurrentActor,
    Milestones,
    NotificationRepo,
    ProposalRepo,
)
from collab.interfaces.auth_provider import Actor
from collab.models.enums import EscrowStatus, UserRole
from collab.models.milestone import (
    ChangeRequest,
    EscrowStatusUpdate,
    Milestone,
    MilestonePermissions,
    MilestoneStatusUpdate,
    ReleaseRequest,
    SupervisorApproval,
)
from collab.models.submission import Submission, SubmissionCreate
from collab.services import chat_events
from collab.services import notification_service as notify
from collab.services.milestone_lifecycle import MilestoneLifecycle
from collab.services.milestone_permissions import (
    REVIEWER_ROLES,
    STUDENT_ROLES,
    ensure_milestone_owner,
    ensure_role,
    get_milestone_permissions,
    is_project_owner,
)

router = APIRouter()


async def _owned_milestone(milestones: MilestoneLifecycle, milestone_id: UUID, actor: Actor) -> Milestone:
    milestone = await milestones.get_milestone(milestone_id)
    ensure_milestone_owner(actor.id, actor.role, milestone)
    return milestone


async def _submitter_ids(milestones: MilestoneLifecycle, milestone_id: UUID) -> list[str]:
    submissions = await milestones.submission_service.list_submissions(milestone_id)
    return [s.by_student_id for s in submissions if s.by_student_id]


@router.get("", response_model=list[Milestone])
async def list_milestones(
    actor: CurrentActor,
    milestones: Milestones,
    project_id: str = Query(..., alias="projectId"),
):
    """List a project's milestones by due date."""
    return await milestones.list_project_milestones(project_id)


@router.get("/{milestone_id}", response_model=Milestone)
async def get_milestone(milestone_id: UUID, actor: CurrentActor, milestones: Milestones):
    return await milestones.get_milestone(milestone_id)


@router.get("/{milestone_id}/permissions", response_model=MilestonePermissions)
async def get_permissions(milestone_id: UUID, actor: CurrentActor, milestones: Milestones):
    """Actions the acting user may take on this milestone."""
    milestone = await milestones.get_milestone(milestone_id)
    return get_milestone_permissions(
        actor.role,
        milestone,
        is_project_owner=is_project_owner(actor.id, milestone),
    )


@router.delete("/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_milestone(milestone_id: UUID, actor: CurrentActor, milestones: Milestones):
    """Delete a milestone before any work has started."""
    await _owned_milestone(milestones, milestone_id, actor)
    await milestones.delete_milestone(milestone_id)


@router.post("/{milestone_id}/status", response_model=Milestone)
async def update_status(
    milestone_id: UUID,
    update: MilestoneStatusUpdate,
    actor: CurrentActor,
    milestones: Milestones,
):
    """Administrative status change; the transition rules still apply."""
    ensure_role(actor.role, {UserRole.SUPER_ADMIN})
    return await milestones.update_status(milestone_id, update.status)


# ===========================================
# Escrow and work
# ===========================================


@router.post("/{milestone_id}/escrow", response_model=Milestone)
async def update_escrow(
    milestone_id: UUID,
    update: EscrowStatusUpdate,
    actor: CurrentActor,
    milestones: Milestones,
    proposal_repo: ProposalRepo,
    notification_repo: NotificationRepo,
):
    """Record an escrow change reported by the funding collaborator."""
    await _owned_milestone(milestones, milestone_id, actor)
    milestone = await milestones.update_escrow_status(milestone_id, update.escrow_status)

    if milestone.escrow_status == EscrowStatus.FUNDED and milestone.source_proposal_id:
        proposal = await proposal_repo.get(milestone.source_proposal_id)
        if proposal:
            await notify.notify_escrow_funded(
                notification_repo, milestone, [proposal.accepted_by], actor.id,
            )
    return milestone


@router.post("/{milestone_id}/start", response_model=Milestone)
async def start_work(
    milestone_id: UUID,
    actor: CurrentActor,
    milestones: Milestones,
    chat_repo: ChatRepo,
):
    ensure_role(actor.role, STUDENT_ROLES)
    milestone = await milestones.start_work(milestone_id)
    await chat_events.post_milestone_event(chat_repo, milestone, actor.id, "work started")
    return milestone


# ===========================================
# Submissions
# ===========================================


@router.post(
    "/{milestone_id}/submissions",
    response_model=Submission,
    status_code=status.HTTP_201_CREATED,
)
async def submit_work(
    milestone_id: UUID,
    data: SubmissionCreate,
    actor: CurrentActor,
    milestones: Milestones,
    notification_repo: NotificationRepo,
    chat_repo: ChatRepo,
):
    """Submit work; the milestone moves to SUBMITTED."""
    ensure_role(actor.role, STUDENT_ROLES)
    if not data.by_student_id and not data.by_group_id:
        data = data.model_copy(update={"by_student_id": actor.id})

    submission = await milestones.submit_work(milestone_id, data)
    milestone = await milestones.get_milestone(milestone_id)
    await notify.notify_milestone_submitted(notification_repo, milestone, actor.id)
    await chat_events.post_milestone_event(chat_repo, milestone, actor.id, "work submitted")
    return submission


@router.get("/{milestone_id}/submissions", response_model=list[Submission])
async def list_submissions(milestone_id: UUID, actor: CurrentActor, milestones: Milestones):
    await milestones.get_milestone(milestone_id)
    return await milestones.submission_service.list_submissions(milestone_id)


# ===========================================
# Supervisor review
# ===========================================


@router.post("/{milestone_id}/review/start", response_model=Milestone)
async def begin_review(milestone_id: UUID, actor: CurrentActor, milestones: Milestones):
    ensure_role(actor.role, REVIEWER_ROLES)
    return await milestones.begin_supervisor_review(milestone_id)


@router.post("/{milestone_id}/review/approve", response_model=Milestone)
async def approve_for_partner(
    milestone_id: UUID,
    approval: SupervisorApproval,
    actor: CurrentActor,
    milestones: Milestones,
    notification_repo: NotificationRepo,
    chat_repo: ChatRepo,
):
    """Supervisor approves the submission for partner review."""
    ensure_role(actor.role, REVIEWER_ROLES)
    milestone = await milestones.approve_for_partner(
        milestone_id,
        notes=approval.notes,
        progress_readiness=approval.progress_readiness,
    )
    await notify.notify_milestone_approved(notification_repo, milestone, actor.id)
    await chat_events.post_milestone_event(
        chat_repo, milestone, actor.id, "approved by supervisor",
    )
    return milestone


@router.post("/{milestone_id}/review/request-changes", response_model=Milestone)
async def supervisor_request_changes(
    milestone_id: UUID,
    request: ChangeRequest,
    actor: CurrentActor,
    milestones: Milestones,
    notification_repo: NotificationRepo,
):
    ensure_role(actor.role, REVIEWER_ROLES)
    milestone = await milestones.request_changes_by_supervisor(milestone_id, request.notes)
    await notify.notify_changes_requested(
        notification_repo, milestone, await _submitter_ids(milestones, milestone_id), actor.id,
    )
    return milestone


# ===========================================
# Partner review
# ===========================================


@router.post("/{milestone_id}/partner/request-changes", response_model=Milestone)
async def partner_request_changes(
    milestone_id: UUID,
    request: ChangeRequest,
    actor: CurrentActor,
    milestones: Milestones,
    notification_repo: NotificationRepo,
):
    await _owned_milestone(milestones, milestone_id, actor)
    milestone = await milestones.request_changes_by_partner(milestone_id, request.notes)
    await notify.notify_changes_requested(
        notification_repo, milestone, await _submitter_ids(milestones, milestone_id), actor.id,
    )
    return milestone


@router.post("/{milestone_id}/partner/release", response_model=Milestone)
async def approve_and_release(
    milestone_id: UUID,
    actor: CurrentActor,
    milestones: Milestones,
    notification_repo: NotificationRepo,
    chat_repo: ChatRepo,
    release: Optional[ReleaseRequest] = Body(None),
):
    """Approve the work and release the escrowed payment."""
    await _owned_milestone(milestones, milestone_id, actor)
    milestone = await milestones.approve_and_release(milestone_id, release)
    students = (release.student_ids if release else None) or await _submitter_ids(
        milestones, milestone_id
    )
    await notify.notify_milestone_released(notification_repo, milestone, students, actor.id)
    await chat_events.post_milestone_event(chat_repo, milestone, actor.id, "payment released")
    return milestone


@router.post("/{milestone_id}/partner/revert", response_model=Milestone)
async def revert_release(milestone_id: UUID, actor: CurrentActor, milestones: Milestones):
    await _owned_milestone(milestones, milestone_id, actor)
    return await milestones.revert_release(milestone_id)


@router.post("/{milestone_id}/partner/complete", response_model=Milestone)
async def mark_complete(
    milestone_id: UUID,
    actor: CurrentActor,
    milestones: Milestones,
    notification_repo: NotificationRepo,
    release: Optional[ReleaseRequest] = Body(None),
):
    await _owned_milestone(milestones, milestone_id, actor)
    milestone = await milestones.mark_complete(milestone_id, release)
    students = (release.student_ids if release else None) or await _submitter_ids(
        milestones, milestone_id
    )
    await notify.notify_milestone_completed(notification_repo, milestone, students, actor.id)
    return milestone


@router.post("/{milestone_id}/partner/uncomplete", response_model=Milestone)
async def unmark_complete(milestone_id: UUID, actor: CurrentActor, milestones: Milestones):
    await _owned_milestone(milestones, milestone_id, actor)
    return await milestones.unmark_complete(milestone_id)
