from __future__ import annotations

from typing import Optional

from collab.core.exceptions import ForbiddenError
from collab.models.enums import MilestoneStatus, UserRole
from collab.models.milestone import Milestone, MilestonePermissions

PRE_WORK_STATUSES = {MilestoneStatus.FINALIZED}
DISPUTABLE_STATUSES = {
    MilestoneStatus.IN_PROGRESS,
    MilestoneStatus.SUBMITTED,
    MilestoneStatus.SUPERVISOR_REVIEW,
    MilestoneStatus.PARTNER_REVIEW,
    MilestoneStatus.CHANGES_REQUESTED,
}
STUDENT_SUBMIT_STATUSES = {
    MilestoneStatus.FINALIZED,
    MilestoneStatus.IN_PROGRESS,
    MilestoneStatus.CHANGES_REQUESTED,
}
REVIEWER_ROLES = {UserRole.SUPERVISOR, UserRole.SUPER_ADMIN}
PARTNER_ROLES = {UserRole.PARTNER, UserRole.SUPER_ADMIN}
STUDENT_ROLES = {UserRole.STUDENT, UserRole.SUPER_ADMIN}


def get_milestone_permissions(
    role: Optional[UserRole],
    milestone: Optional[Milestone],
    is_project_owner: bool = False,
) -> MilestonePermissions:
    """Flags for what ``role`` may do with ``milestone`` in its current status."""
    if role is None:
        return MilestonePermissions()

    if milestone is None:
        if (role == UserRole.PARTNER and is_project_owner) or role == UserRole.SUPER_ADMIN:
            return MilestonePermissions(can_edit=True, can_add=True)
        return MilestonePermissions()

    status = milestone.status

    if role == UserRole.PARTNER:
        owner = is_project_owner
        return MilestonePermissions(
            can_edit=owner and status in PRE_WORK_STATUSES,
            can_add=owner,
            can_approve_and_release=(
                owner and status == MilestoneStatus.PARTNER_REVIEW and milestone.supervisor_gate
            ),
            can_disapprove=owner and status == MilestoneStatus.RELEASED,
            can_request_changes=owner and status == MilestoneStatus.PARTNER_REVIEW,
            can_fund_escrow=owner and status == MilestoneStatus.FINALIZED,
            can_dispute=owner and status in DISPUTABLE_STATUSES,
            can_mark_as_complete=owner and status == MilestoneStatus.RELEASED,
            can_unmark_as_complete=owner and status == MilestoneStatus.COMPLETED,
        )

    if role == UserRole.STUDENT:
        return MilestonePermissions(
            can_submit=status in STUDENT_SUBMIT_STATUSES,
            can_dispute=status in DISPUTABLE_STATUSES,
        )

    if role in (UserRole.SUPERVISOR, UserRole.UNIVERSITY_ADMIN):
        return MilestonePermissions(can_dispute=status in DISPUTABLE_STATUSES)

    if role == UserRole.SUPER_ADMIN:
        return MilestonePermissions(
            can_edit=True,
            can_add=True,
            can_approve_and_release=status == MilestoneStatus.PARTNER_REVIEW,
            can_disapprove=status == MilestoneStatus.RELEASED,
            can_request_changes=status == MilestoneStatus.PARTNER_REVIEW,
            can_fund_escrow=status == MilestoneStatus.FINALIZED,
            can_dispute=True,
            can_mark_as_complete=status == MilestoneStatus.RELEASED,
            can_unmark_as_complete=status == MilestoneStatus.COMPLETED,
        )

    return MilestonePermissions()


def is_project_owner(actor_id: str, milestone: Milestone) -> bool:
    """The partner who finalized a milestone owns it."""
    return milestone.finalized_by is not None and milestone.finalized_by == actor_id


def ensure_role(role: UserRole, allowed_roles: set[UserRole]) -> UserRole:
    if role not in allowed_roles:
        raise ForbiddenError("Insufficient role")
    return role


def ensure_milestone_owner(actor_id: str, role: UserRole, milestone: Milestone) -> None:
    if role == UserRole.SUPER_ADMIN:
        return
    if role != UserRole.PARTNER or not is_project_owner(actor_id, milestone):
        raise ForbiddenError("Only the owning partner can do this")
