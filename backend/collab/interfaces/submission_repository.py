"""Interface for the milestone submission store."""

from abc import ABC, abstractmethod
from uuid import UUID

from collab.models.submission import Submission


class ISubmissionRepository(ABC):
    """Persists work submissions."""

    @abstractmethod
    async def add(self, submission: Submission) -> Submission:
        """Store a fully built submission."""
        pass

    @abstractmethod
    async def add_and_mark_submitted(self, submission: Submission, milestone_version: int) -> Submission:
        """Store ``submission`` and move its milestone to SUBMITTED in one transaction.

        Raises:
            NotFoundError: If the milestone does not exist
            ConcurrencyError: If the milestone version moved on; nothing is stored
        """
        pass

    @abstractmethod
    async def list_by_milestone(self, milestone_id: UUID) -> list[Submission]:
        """List submissions for a milestone, oldest first."""
        pass
