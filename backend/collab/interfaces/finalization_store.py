"""
Transactional boundary for finalizing a proposal.

Milestone creation and the proposal's move to FINALIZED happen together or
not at all.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from collab.models.milestone import Milestone, MilestoneCreate


class IFinalizationStore(ABC):
    """Commits the finalize hand-off between proposals and milestones."""

    @abstractmethod
    async def finalize(
        self,
        proposal_id: UUID,
        expected_version: int,
        milestone: MilestoneCreate,
    ) -> Milestone:
        """Insert ``milestone`` and mark the proposal FINALIZED in one transaction.

        If a milestone already exists for ``proposal_id`` it is returned and
        the proposal status is repaired; no second milestone is created.

        Raises:
            NotFoundError: If the proposal does not exist
            ConcurrencyError: If the proposal version moved on
        """
        pass
