"""Interface for the portfolio read/write source."""

from abc import ABC, abstractmethod
from uuid import UUID

from collab.models.portfolio import PortfolioItem, PortfolioItemCreate


class IPortfolioRepository(ABC):
    """Persists verified portfolio items."""

    @abstractmethod
    async def create_many(self, items: list[PortfolioItemCreate]) -> list[PortfolioItem]:
        """Create portfolio items in one batch."""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[PortfolioItem]:
        """List a user's portfolio items, newest first."""
        pass

    @abstractmethod
    async def list_user_ids_for_milestone(self, milestone_id: UUID) -> set[str]:
        """Users who already have an entry for a milestone."""
        pass
