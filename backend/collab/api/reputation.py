"""Portfolio and reputation API endpoints."""

from fastapi import APIRouter

from collab.api.deps import CurrentActor, Portfolio, Reputation
from collab.models.portfolio import PortfolioItem, ReputationScore

router = APIRouter()


@router.get("/reputation/{user_id}", response_model=ReputationScore)
async def get_reputation(user_id: str, actor: CurrentActor, reputation: Reputation):
    """Score a user from their verified portfolio."""
    return await reputation.calculate_reputation(user_id)


@router.get("/portfolio/{user_id}", response_model=list[PortfolioItem])
async def get_portfolio(user_id: str, actor: CurrentActor, portfolio: Portfolio):
    return await portfolio.get_user_portfolio(user_id)
