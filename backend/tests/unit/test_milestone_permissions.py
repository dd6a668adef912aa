"""
Tests for the milestone permission matrix and the authorization helpers.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from collab.core.exceptions import ForbiddenError
from collab.models.enums import EscrowStatus, MilestoneStatus, UserRole
from collab.models.milestone import Milestone, MilestonePermissions
from collab.services.milestone_permissions import (
    PARTNER_ROLES,
    ensure_milestone_owner,
    ensure_role,
    get_milestone_permissions,
    is_project_owner,
)
from collab.utils.datetime_utils import now_utc


def make_milestone(status: MilestoneStatus, supervisor_gate: bool = True) -> Milestone:
    now = now_utc()
    return Milestone(
        id=uuid4(),
        project_id="project-1",
        title="API redesign",
        scope="Redesign the public API surface",
        acceptance_criteria="All endpoints documented and tested",
        due_date=now + timedelta(days=7),
        amount=1000,
        escrow_status=EscrowStatus.FUNDED,
        supervisor_gate=supervisor_gate,
        status=status,
        finalized_by="partner-1",
        created_at=now,
        updated_at=now,
    )


def test_no_role_gets_nothing():
    perms = get_milestone_permissions(None, make_milestone(MilestoneStatus.PARTNER_REVIEW), True)
    assert perms == MilestonePermissions()


@pytest.mark.parametrize(
    "role, owner, expected",
    [
        (UserRole.PARTNER, True, True),
        (UserRole.PARTNER, False, False),
        (UserRole.SUPER_ADMIN, False, True),
        (UserRole.STUDENT, True, False),
    ],
)
def test_new_milestone_permissions(role, owner, expected):
    perms = get_milestone_permissions(role, None, is_project_owner=owner)
    assert perms.can_add is expected
    assert perms.can_edit is expected


class TestPartner:
    def test_owner_in_partner_review(self):
        perms = get_milestone_permissions(
            UserRole.PARTNER, make_milestone(MilestoneStatus.PARTNER_REVIEW), is_project_owner=True,
        )
        assert perms.can_approve_and_release
        assert perms.can_request_changes
        assert perms.can_dispute
        assert not perms.can_edit
        assert not perms.can_fund_escrow
        assert not perms.can_mark_as_complete

    def test_release_needs_supervisor_gate(self):
        perms = get_milestone_permissions(
            UserRole.PARTNER,
            make_milestone(MilestoneStatus.PARTNER_REVIEW, supervisor_gate=False),
            is_project_owner=True,
        )
        assert not perms.can_approve_and_release
        assert perms.can_request_changes

    def test_non_owner_gets_nothing(self):
        perms = get_milestone_permissions(
            UserRole.PARTNER, make_milestone(MilestoneStatus.PARTNER_REVIEW), is_project_owner=False,
        )
        assert perms == MilestonePermissions()

    def test_owner_before_work(self):
        perms = get_milestone_permissions(
            UserRole.PARTNER, make_milestone(MilestoneStatus.FINALIZED), is_project_owner=True,
        )
        assert perms.can_edit
        assert perms.can_add
        assert perms.can_fund_escrow
        assert not perms.can_dispute

    def test_owner_after_release(self):
        perms = get_milestone_permissions(
            UserRole.PARTNER, make_milestone(MilestoneStatus.RELEASED), is_project_owner=True,
        )
        assert perms.can_disapprove
        assert perms.can_mark_as_complete
        assert not perms.can_unmark_as_complete

        completed = get_milestone_permissions(
            UserRole.PARTNER, make_milestone(MilestoneStatus.COMPLETED), is_project_owner=True,
        )
        assert completed.can_unmark_as_complete
        assert not completed.can_mark_as_complete


class TestOtherRoles:
    @pytest.mark.parametrize(
        "status, can_submit",
        [
            (MilestoneStatus.FINALIZED, True),
            (MilestoneStatus.IN_PROGRESS, True),
            (MilestoneStatus.CHANGES_REQUESTED, True),
            (MilestoneStatus.SUBMITTED, False),
            (MilestoneStatus.RELEASED, False),
        ],
    )
    def test_student_submit(self, status, can_submit):
        perms = get_milestone_permissions(UserRole.STUDENT, make_milestone(status))
        assert perms.can_submit is can_submit
        assert not perms.can_approve_and_release

    @pytest.mark.parametrize("role", [UserRole.SUPERVISOR, UserRole.UNIVERSITY_ADMIN])
    def test_reviewers_can_only_dispute(self, role):
        perms = get_milestone_permissions(role, make_milestone(MilestoneStatus.SUBMITTED))
        assert perms == MilestonePermissions(can_dispute=True)

        released = get_milestone_permissions(role, make_milestone(MilestoneStatus.RELEASED))
        assert released == MilestonePermissions()

    def test_super_admin(self):
        perms = get_milestone_permissions(
            UserRole.SUPER_ADMIN, make_milestone(MilestoneStatus.PARTNER_REVIEW, supervisor_gate=False),
        )
        assert perms.can_edit
        assert perms.can_add
        assert perms.can_approve_and_release
        assert perms.can_dispute
        assert not perms.can_submit


class TestAuthorizationHelpers:
    def test_project_owner_is_finalizer(self):
        milestone = make_milestone(MilestoneStatus.FINALIZED)
        assert is_project_owner("partner-1", milestone)
        assert not is_project_owner("partner-2", milestone)

    def test_ensure_role(self):
        assert ensure_role(UserRole.PARTNER, PARTNER_ROLES) == UserRole.PARTNER
        with pytest.raises(ForbiddenError, match="Insufficient role"):
            ensure_role(UserRole.STUDENT, PARTNER_ROLES)

    def test_ensure_milestone_owner(self):
        milestone = make_milestone(MilestoneStatus.PARTNER_REVIEW)

        ensure_milestone_owner("partner-1", UserRole.PARTNER, milestone)
        ensure_milestone_owner("admin-1", UserRole.SUPER_ADMIN, milestone)

        with pytest.raises(ForbiddenError):
            ensure_milestone_owner("partner-2", UserRole.PARTNER, milestone)
        with pytest.raises(ForbiddenError):
            ensure_milestone_owner("partner-1", UserRole.STUDENT, milestone)
