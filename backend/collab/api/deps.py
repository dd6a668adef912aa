"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the configured
infrastructure implementations and the services built on them.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from collab.core.config import get_settings
from collab.core.exceptions import AuthenticationError
from collab.interfaces.auth_provider import Actor, IAuthProvider
from collab.interfaces.chat_repository import IChatRepository
from collab.interfaces.finalization_store import IFinalizationStore
from collab.interfaces.milestone_repository import IMilestoneRepository
from collab.interfaces.notification_repository import INotificationRepository
from collab.interfaces.portfolio_repository import IPortfolioRepository
from collab.interfaces.proposal_repository import IProposalRepository
from collab.interfaces.submission_repository import ISubmissionRepository
from collab.models.enums import UserRole
from collab.services.milestone_lifecycle import MilestoneLifecycle
from collab.services.portfolio_service import PortfolioService
from collab.services.proposal_lifecycle import ProposalLifecycle
from collab.services.reputation_service import ReputationService
from collab.services.submission_service import SubmissionService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_proposal_repository() -> IProposalRepository:
    """Get proposal repository instance."""
    from collab.infrastructure.local.proposal_repository import SqliteProposalRepository
    return SqliteProposalRepository()


@lru_cache()
def get_milestone_repository() -> IMilestoneRepository:
    """Get milestone repository instance."""
    from collab.infrastructure.local.milestone_repository import SqliteMilestoneRepository
    return SqliteMilestoneRepository()


@lru_cache()
def get_finalization_store() -> IFinalizationStore:
    from collab.infrastructure.local.finalization_store import SqliteFinalizationStore
    return SqliteFinalizationStore()


@lru_cache()
def get_submission_repository() -> ISubmissionRepository:
    from collab.infrastructure.local.submission_repository import SqliteSubmissionRepository
    return SqliteSubmissionRepository()


@lru_cache()
def get_portfolio_repository() -> IPortfolioRepository:
    from collab.infrastructure.local.portfolio_repository import SqlitePortfolioRepository
    return SqlitePortfolioRepository()


@lru_cache()
def get_notification_repository() -> INotificationRepository:
    """Get notification repository instance."""
    from collab.infrastructure.local.notification_repository import SqliteNotificationRepository
    return SqliteNotificationRepository()


@lru_cache()
def get_chat_repository() -> IChatRepository:
    from collab.infrastructure.local.chat_repository import SqliteChatRepository
    return SqliteChatRepository()


# ===========================================
# Service Dependencies
# ===========================================


def get_proposal_lifecycle(
    proposal_repo: IProposalRepository = Depends(get_proposal_repository),
    finalization_store: IFinalizationStore = Depends(get_finalization_store),
) -> ProposalLifecycle:
    settings = get_settings()
    return ProposalLifecycle(
        proposal_repo,
        finalization_store,
        currency=settings.DEFAULT_CURRENCY,
    )


def get_submission_service(
    submission_repo: ISubmissionRepository = Depends(get_submission_repository),
) -> SubmissionService:
    settings = get_settings()
    return SubmissionService(
        submission_repo,
        max_files=settings.SUBMISSION_MAX_FILES,
        max_file_bytes=settings.SUBMISSION_MAX_FILE_BYTES,
        notes_max_length=settings.SUBMISSION_NOTES_MAX_LENGTH,
    )


def get_portfolio_service(
    portfolio_repo: IPortfolioRepository = Depends(get_portfolio_repository),
    submission_repo: ISubmissionRepository = Depends(get_submission_repository),
) -> PortfolioService:
    return PortfolioService(
        portfolio_repo,
        submission_repo,
        default_role=get_settings().PORTFOLIO_DEFAULT_ROLE,
    )


def get_milestone_lifecycle(
    milestone_repo: IMilestoneRepository = Depends(get_milestone_repository),
    submission_service: SubmissionService = Depends(get_submission_service),
    portfolio_service: PortfolioService = Depends(get_portfolio_service),
) -> MilestoneLifecycle:
    return MilestoneLifecycle(milestone_repo, submission_service, portfolio_service)


def get_reputation_service(
    portfolio_repo: IPortfolioRepository = Depends(get_portfolio_repository),
) -> ReputationService:
    return ReputationService(portfolio_repo, project_cap=get_settings().REPUTATION_PROJECT_CAP)


# ===========================================
# Authentication
# ===========================================


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "jwt":
        from collab.infrastructure.auth.jwt_auth import JwtAuthProvider

        return JwtAuthProvider(settings)

    from collab.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=settings.AUTH_REQUIRED)


async def get_current_actor(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> Actor:
    """
    Resolve the acting user from ``Authorization: Bearer <token>``.

    With authentication disabled a missing header falls back to the
    development user; a header that is present is still honoured.
    Failures raise ``AuthenticationError`` and surface as 401.
    """
    if not authorization:
        if auth_provider.is_enabled():
            raise AuthenticationError("Authorization header required")
        return Actor(id="dev_user", role=UserRole.SUPER_ADMIN)

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Expected a bearer token")
    return await auth_provider.verify_token(token.strip())


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ProposalRepo = Annotated[IProposalRepository, Depends(get_proposal_repository)]
NotificationRepo = Annotated[INotificationRepository, Depends(get_notification_repository)]
ChatRepo = Annotated[IChatRepository, Depends(get_chat_repository)]
Proposals = Annotated[ProposalLifecycle, Depends(get_proposal_lifecycle)]
Milestones = Annotated[MilestoneLifecycle, Depends(get_milestone_lifecycle)]
Portfolio = Annotated[PortfolioService, Depends(get_portfolio_service)]
Reputation = Annotated[ReputationService, Depends(get_reputation_service)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
