"""Interface for the milestone proposal store."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from collab.models.proposal import MilestoneProposal


class IProposalRepository(ABC):
    """Persists milestone proposals."""

    @abstractmethod
    async def create(
        self,
        *,
        project_id: str,
        proposer_id: str,
        title: str,
        scope: str,
        acceptance_criteria: str,
        due_date: datetime,
        amount: Optional[float],
    ) -> MilestoneProposal:
        """Create a new proposal in PROPOSED status with version 1."""
        pass

    @abstractmethod
    async def get(self, proposal_id: UUID) -> Optional[MilestoneProposal]:
        """Get a proposal by ID.

        Returns:
            The proposal if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_project(self, project_id: str) -> list[MilestoneProposal]:
        """List proposals for a project, newest first."""
        pass

    @abstractmethod
    async def update(
        self,
        proposal_id: UUID,
        expected_version: int,
        changes: dict[str, Any],
    ) -> MilestoneProposal:
        """Apply ``changes`` if the stored version equals ``expected_version``.

        The version is incremented and ``updated_at`` refreshed.

        Raises:
            NotFoundError: If the proposal does not exist
            ConcurrencyError: If the stored version moved on
        """
        pass

    @abstractmethod
    async def delete(self, proposal_id: UUID) -> bool:
        """Delete a proposal.

        Returns:
            True if deleted, False if not found
        """
        pass
