"""
Portfolio and reputation models.

Portfolio items are verified records of delivered work; the reputation score
is derived from them on demand and never stored authoritatively.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, computed_field, field_validator

from collab.models.base import CollabModel, unwrap_option_value
from collab.models.enums import Complexity


class PortfolioItemCreate(CollabModel):
    """Portfolio entry built from a completed milestone."""

    user_id: str
    project_id: str
    milestone_id: Optional[UUID] = None
    role: str
    scope: str
    proof: list[str] = Field(default_factory=list)
    rating: Optional[int] = Field(None, ge=1, le=5)
    complexity: Complexity
    amount_delivered: float = Field(..., ge=0)
    currency: str = "USD"
    on_time: bool

    @field_validator("complexity", mode="before")
    @classmethod
    def _unwrap_complexity(cls, value):
        return unwrap_option_value(value)


class PortfolioItem(PortfolioItemCreate):
    """Stored portfolio entry."""

    id: UUID
    verified_at: datetime
    created_at: datetime


class ReputationFactors(CollabModel):
    """Inputs to the reputation score."""

    completed_projects: int = 0
    average_rating: float = 0.0
    on_time_rate: float = 0.0
    dispute_rate: float = 0.0
    rework_rate: float = 0.0
    complexity_bonus: float = 0.0


class ReputationScore(CollabModel):
    """Reputation summary for a user."""

    user_id: str
    score: float = Field(..., ge=0, le=1)
    factors: ReputationFactors
    last_calculated_at: datetime

    @computed_field
    @property
    def display_score(self) -> int:
        """Score on the 0-100 scale shown to users."""
        return round(self.score * 100)
