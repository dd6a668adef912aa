"""
Reputation service.

Scores a user from their verified portfolio. Weights:

- completed projects: 20% (capped)
- average rating: 30%
- on-time rate: 25%
- complexity: 10%
- dispute rate: -15%
- rework rate: -10%

Dispute and rework rates have no data source yet and are always 0.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from collab.interfaces.portfolio_repository import IPortfolioRepository
from collab.models.enums import Complexity
from collab.models.portfolio import PortfolioItem, ReputationFactors, ReputationScore
from collab.utils.datetime_utils import now_utc

COMPLEXITY_POINTS = {
    Complexity.LOW: 1,
    Complexity.MEDIUM: 2,
    Complexity.HIGH: 3,
}


def calculate_factors(items: list[PortfolioItem]) -> ReputationFactors:
    if not items:
        return ReputationFactors()

    completed_projects = len({item.project_id for item in items})

    # Amount-weighted over rated items only
    total_rating = 0.0
    total_weight = 0.0
    for item in items:
        if item.rating:
            total_rating += item.rating * item.amount_delivered
            total_weight += item.amount_delivered
    average_rating = total_rating / total_weight if total_weight > 0 else 0.0

    on_time_rate = sum(1 for item in items if item.on_time) / len(items)
    complexity_bonus = sum(COMPLEXITY_POINTS[item.complexity] for item in items) / len(items)

    return ReputationFactors(
        completed_projects=completed_projects,
        average_rating=average_rating,
        on_time_rate=on_time_rate,
        dispute_rate=0.0,
        rework_rate=0.0,
        complexity_bonus=complexity_bonus,
    )


def calculate_score(factors: ReputationFactors, project_cap: int = 10) -> float:
    """Weighted score clamped to [0, 1]."""
    project_score = min(factors.completed_projects / project_cap, 1.0)
    rating_score = (factors.average_rating - 1) / 4
    complexity_score = (factors.complexity_bonus - 1) / 2

    score = (
        project_score * 0.2
        + rating_score * 0.3
        + factors.on_time_rate * 0.25
        + complexity_score * 0.1
        - factors.dispute_rate * 0.15
        - factors.rework_rate * 0.1
    )
    return max(0.0, min(1.0, score))


class ReputationService:
    """Assembles reputation scores from the portfolio source."""

    def __init__(
        self,
        portfolio_repo: IPortfolioRepository,
        project_cap: int = 10,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.portfolio_repo = portfolio_repo
        self.project_cap = project_cap
        self.clock = clock

    async def calculate_reputation(
        self,
        user_id: str,
        items: Optional[list[PortfolioItem]] = None,
    ) -> ReputationScore:
        if items is None:
            items = await self.portfolio_repo.list_by_user(user_id)

        factors = calculate_factors(items)
        score = calculate_score(factors, self.project_cap)
        return ReputationScore(
            user_id=user_id,
            score=round(score, 2),
            factors=factors,
            last_calculated_at=self.clock(),
        )
