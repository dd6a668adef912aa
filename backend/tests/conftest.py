"""
Shared fixtures: an in-memory SQLite database and the repositories and
services built on it.
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from collab.infrastructure.local.chat_repository import SqliteChatRepository
from collab.infrastructure.local.database import Base
from collab.infrastructure.local.finalization_store import SqliteFinalizationStore
from collab.infrastructure.local.milestone_repository import SqliteMilestoneRepository
from collab.infrastructure.local.notification_repository import SqliteNotificationRepository
from collab.infrastructure.local.portfolio_repository import SqlitePortfolioRepository
from collab.infrastructure.local.proposal_repository import SqliteProposalRepository
from collab.infrastructure.local.submission_repository import SqliteSubmissionRepository
from collab.models.enums import EscrowStatus
from collab.models.proposal import MilestoneProposalCreate
from collab.services.milestone_lifecycle import MilestoneLifecycle
from collab.services.portfolio_service import PortfolioService
from collab.services.proposal_lifecycle import ProposalLifecycle
from collab.services.submission_service import SubmissionService
from collab.utils.datetime_utils import now_utc


@pytest.fixture
async def session_factory():
    """Create in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def proposal_repo(session_factory):
    return SqliteProposalRepository(session_factory=session_factory)


@pytest.fixture
def milestone_repo(session_factory):
    return SqliteMilestoneRepository(session_factory=session_factory)


@pytest.fixture
def finalization_store(session_factory):
    return SqliteFinalizationStore(session_factory=session_factory)


@pytest.fixture
def submission_repo(session_factory):
    return SqliteSubmissionRepository(session_factory=session_factory)


@pytest.fixture
def portfolio_repo(session_factory):
    return SqlitePortfolioRepository(session_factory=session_factory)


@pytest.fixture
def notification_repo(session_factory):
    return SqliteNotificationRepository(session_factory=session_factory)


@pytest.fixture
def chat_repo(session_factory):
    return SqliteChatRepository(session_factory=session_factory)


@pytest.fixture
def proposal_lifecycle(proposal_repo, finalization_store):
    return ProposalLifecycle(proposal_repo, finalization_store)


@pytest.fixture
def submission_service(submission_repo):
    return SubmissionService(submission_repo)


@pytest.fixture
def portfolio_service(portfolio_repo, submission_repo):
    return PortfolioService(portfolio_repo, submission_repo)


@pytest.fixture
def milestone_lifecycle(milestone_repo, submission_service, portfolio_service):
    return MilestoneLifecycle(milestone_repo, submission_service, portfolio_service)


@pytest.fixture
def proposal_data():
    """A valid proposal payload due tomorrow."""
    return MilestoneProposalCreate(
        project_id="project-1",
        proposer_id="partner-1",
        title="API redesign",
        scope="Redesign the public API surface",
        acceptance_criteria="All endpoints documented and tested",
        due_date=now_utc() + timedelta(days=1),
        amount=1000,
    )


@pytest.fixture
async def finalized_milestone(proposal_lifecycle, proposal_data):
    """A milestone fresh out of finalization (escrow PENDING)."""
    proposal = await proposal_lifecycle.create_proposal(proposal_data)
    await proposal_lifecycle.accept_proposal(proposal.id, accepted_by="student-1")
    return await proposal_lifecycle.finalize_proposal(proposal.id, finalizer_id="partner-1")


@pytest.fixture
async def funded_milestone(milestone_lifecycle, finalized_milestone):
    return await milestone_lifecycle.update_escrow_status(finalized_milestone.id, EscrowStatus.FUNDED)
