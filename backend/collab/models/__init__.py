"""Pydantic models (schemas) for the application."""

from collab.models.enums import (
    Complexity,
    EscrowStatus,
    MilestoneStatus,
    ProposalStatus,
    UserRole,
)
from collab.models.proposal import MilestoneProposal, MilestoneProposalCreate, MilestoneProposalUpdate
from collab.models.milestone import Milestone, MilestoneCreate, MilestonePermissions, MilestoneUpdate
from collab.models.submission import Submission, SubmissionCreate, SubmissionFile
from collab.models.portfolio import PortfolioItem, PortfolioItemCreate, ReputationFactors, ReputationScore
from collab.models.notification import Notification, NotificationCreate, NotificationType
from collab.models.chat import ChatMessage, ChatMessageCreate, ChatMessageKind

__all__ = [
    # Enums
    "ProposalStatus",
    "MilestoneStatus",
    "EscrowStatus",
    "Complexity",
    "UserRole",
    # Proposal
    "MilestoneProposal",
    "MilestoneProposalCreate",
    "MilestoneProposalUpdate",
    # Milestone
    "Milestone",
    "MilestoneCreate",
    "MilestoneUpdate",
    "MilestonePermissions",
    # Submission
    "Submission",
    "SubmissionCreate",
    "SubmissionFile",
    # Portfolio
    "PortfolioItem",
    "PortfolioItemCreate",
    "ReputationFactors",
    "ReputationScore",
    # Notification
    "Notification",
    "NotificationCreate",
    "NotificationType",
    # Chat
    "ChatMessage",
    "ChatMessageCreate",
    "ChatMessageKind",
]
