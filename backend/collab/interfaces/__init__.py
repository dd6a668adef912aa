"""Abstract interfaces for infrastructure abstraction."""

from collab.interfaces.auth_provider import IAuthProvider
from collab.interfaces.chat_repository import IChatRepository
from collab.interfaces.finalization_store import IFinalizationStore
from collab.interfaces.milestone_repository import IMilestoneRepository
from collab.interfaces.notification_repository import INotificationRepository
from collab.interfaces.portfolio_repository import IPortfolioRepository
from collab.interfaces.proposal_repository import IProposalRepository
from collab.interfaces.submission_repository import ISubmissionRepository

__all__ = [
    "IProposalRepository",
    "IMilestoneRepository",
    "IFinalizationStore",
    "ISubmissionRepository",
    "IPortfolioRepository",
    "INotificationRepository",
    "IChatRepository",
    "IAuthProvider",
]
