"""
Milestone repository interface.

Defines the contract for milestone data operations.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from collab.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate


class IMilestoneRepository(ABC):
    """Interface for milestone repository operations."""

    @abstractmethod
    async def create(self, milestone: MilestoneCreate) -> Milestone:
        """Create a new milestone."""
        pass

    @abstractmethod
    async def get(self, milestone_id: UUID) -> Optional[Milestone]:
        """Get a milestone by ID."""
        pass

    @abstractmethod
    async def get_by_source_proposal(self, proposal_id: UUID) -> Optional[Milestone]:
        """Get the milestone materialized from a proposal, if any."""
        pass

    @abstractmethod
    async def list_by_project(self, project_id: str) -> list[Milestone]:
        """List milestones for a project ordered by due date."""
        pass

    @abstractmethod
    async def update(
        self,
        milestone_id: UUID,
        update: MilestoneUpdate,
        expected_version: Optional[int] = None,
    ) -> Milestone:
        """Update a milestone, optionally conditional on its version.

        Raises:
            NotFoundError: If the milestone does not exist
            ConcurrencyError: If ``expected_version`` is stale
        """
        pass

    @abstractmethod
    async def delete(self, milestone_id: UUID) -> bool:
        """Delete a milestone. Returns True if deleted, False if not found."""
        pass
