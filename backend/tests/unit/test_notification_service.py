"""
Tests for notification recipient selection.
"""

from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from collab.models.enums import MilestoneStatus, ProposalStatus
from collab.models.milestone import Milestone
from collab.models.notification import NotificationType
from collab.models.proposal import MilestoneProposal
from collab.services import notification_service as notify
from collab.utils.datetime_utils import now_utc


@pytest.fixture
def repo():
    return AsyncMock()


@pytest.fixture
def proposal():
    now = now_utc()
    return MilestoneProposal(
        id=uuid4(),
        project_id="project-1",
        proposer_id="partner-1",
        title="API redesign",
        scope="Redesign the public API surface",
        acceptance_criteria="All endpoints documented and tested",
        due_date=now + timedelta(days=1),
        amount=1000,
        status=ProposalStatus.ACCEPTED,
        accepted_by="student-1",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def milestone(proposal):
    now = now_utc()
    return Milestone(
        id=uuid4(),
        project_id=proposal.project_id,
        source_proposal_id=proposal.id,
        title=proposal.title,
        scope=proposal.scope,
        acceptance_criteria=proposal.acceptance_criteria,
        due_date=proposal.due_date,
        amount=1000,
        status=MilestoneStatus.SUBMITTED,
        finalized_by="partner-1",
        created_at=now,
        updated_at=now,
    )


def sent(repo) -> list:
    return repo.create_bulk.await_args.args[0]


async def test_proposal_accepted_notifies_proposer(repo, proposal):
    count = await notify.notify_proposal_accepted(repo, proposal, "student-1")

    assert count == 1
    [notification] = sent(repo)
    assert notification.user_id == "partner-1"
    assert notification.type == NotificationType.PROPOSAL_ACCEPTED
    assert notification.link_type == "proposal"
    assert notification.link_id == str(proposal.id)
    assert notification.project_id == "project-1"


async def test_finalized_skips_the_actor(repo, proposal, milestone):
    count = await notify.notify_proposal_finalized(repo, proposal, milestone, "partner-1")

    assert count == 1
    [notification] = sent(repo)
    assert notification.user_id == "student-1"
    assert notification.link_type == "milestone"
    assert "1000 USD" in notification.message


async def test_submitted_notifies_owner(repo, milestone):
    await notify.notify_milestone_submitted(repo, milestone, "student-1")
    assert [n.user_id for n in sent(repo)] == ["partner-1"]


async def test_recipients_are_deduplicated(repo, milestone):
    count = await notify.notify_milestone_released(
        repo, milestone, ["student-2", "student-1", "student-2", None, ""], "partner-1",
    )
    assert count == 2
    assert [n.user_id for n in sent(repo)] == ["student-1", "student-2"]
    assert all(n.type == NotificationType.MILESTONE_RELEASED for n in sent(repo))


async def test_nothing_sent_without_recipients(repo, milestone):
    count = await notify.notify_changes_requested(repo, milestone, ["partner-1"], "partner-1")
    assert count == 0
    repo.create_bulk.assert_not_awaited()
