"""
Enum definitions for the application.

These enums are used across models and provide type-safe status values.
"""

from enum import Enum


class ProposalStatus(str, Enum):
    """Milestone proposal status. Only ever advances left to right."""

    PROPOSED = "PROPOSED"
    ACCEPTED = "ACCEPTED"
    FINALIZED = "FINALIZED"


class MilestoneStatus(str, Enum):
    """Milestone status."""

    FINALIZED = "FINALIZED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    SUPERVISOR_REVIEW = "SUPERVISOR_REVIEW"
    PARTNER_REVIEW = "PARTNER_REVIEW"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    RELEASED = "RELEASED"
    COMPLETED = "COMPLETED"


class EscrowStatus(str, Enum):
    """
    Funding state of a milestone payout.

    Owned by the external funding collaborator; the lifecycle only records it.
    """

    PENDING = "PENDING"
    FUNDED = "FUNDED"
    HELD = "HELD"
    RELEASED = "RELEASED"


class Complexity(str, Enum):
    """Complexity band of a delivered milestone."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class UserRole(str, Enum):
    """Platform role of the acting user."""

    PARTNER = "partner"
    STUDENT = "student"
    SUPERVISOR = "supervisor"
    UNIVERSITY_ADMIN = "university-admin"
    SUPER_ADMIN = "super-admin"
