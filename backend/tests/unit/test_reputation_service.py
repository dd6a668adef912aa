"""
Tests for reputation scoring.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from collab.models.enums import Complexity
from collab.models.portfolio import PortfolioItem, ReputationFactors
from collab.services.reputation_service import (
    ReputationService,
    calculate_factors,
    calculate_score,
)
from collab.utils.datetime_utils import now_utc


def make_item(
    project_id: str = "project-1",
    rating=None,
    amount: float = 1000,
    on_time: bool = True,
    complexity: Complexity = Complexity.MEDIUM,
) -> PortfolioItem:
    now = now_utc()
    return PortfolioItem(
        id=uuid4(),
        user_id="student-1",
        project_id=project_id,
        milestone_id=uuid4(),
        role="Project Contributor",
        scope="Redesign the public API surface",
        rating=rating,
        complexity=complexity,
        amount_delivered=amount,
        on_time=on_time,
        verified_at=now,
        created_at=now,
    )


@pytest.fixture
def two_items():
    return [
        make_item(project_id="project-1", rating=4, amount=1000, on_time=True, complexity=Complexity.MEDIUM),
        make_item(project_id="project-2", rating=5, amount=3000, on_time=False, complexity=Complexity.HIGH),
    ]


class TestCalculateFactors:
    def test_empty_portfolio(self):
        factors = calculate_factors([])
        assert factors == ReputationFactors()
        assert factors.completed_projects == 0
        assert factors.average_rating == 0.0

    def test_two_item_example(self, two_items):
        factors = calculate_factors(two_items)

        assert factors.completed_projects == 2
        assert factors.average_rating == pytest.approx(4.75)
        assert factors.on_time_rate == pytest.approx(0.5)
        assert factors.complexity_bonus == pytest.approx(2.5)
        assert factors.dispute_rate == 0.0
        assert factors.rework_rate == 0.0

    def test_projects_counted_once(self):
        items = [make_item(project_id="project-1"), make_item(project_id="project-1")]
        assert calculate_factors(items).completed_projects == 1

    def test_unrated_items_excluded_from_rating(self):
        items = [make_item(rating=None, amount=5000), make_item(rating=3, amount=1000)]
        assert calculate_factors(items).average_rating == pytest.approx(3.0)

    def test_no_ratings(self):
        assert calculate_factors([make_item()]).average_rating == 0.0


class TestCalculateScore:
    def test_two_item_example(self, two_items):
        score = calculate_score(calculate_factors(two_items))
        # 0.2*0.2 + 0.3*0.9375 + 0.25*0.5 + 0.1*0.75
        assert score == pytest.approx(0.52125)

    def test_perfect_record(self):
        factors = ReputationFactors(
            completed_projects=10,
            average_rating=5,
            on_time_rate=1.0,
            complexity_bonus=3,
        )
        assert calculate_score(factors) == pytest.approx(0.85)

    def test_project_count_is_capped(self):
        at_cap = ReputationFactors(completed_projects=10, average_rating=3)
        above_cap = ReputationFactors(completed_projects=40, average_rating=3)
        assert calculate_score(above_cap) == calculate_score(at_cap)
        assert calculate_score(at_cap, project_cap=20) < calculate_score(at_cap)

    def test_clamped_at_zero(self):
        factors = ReputationFactors(dispute_rate=1.0, rework_rate=1.0)
        assert calculate_score(factors) == 0.0

    def test_clamped_at_one(self):
        factors = ReputationFactors(
            completed_projects=10,
            average_rating=10,
            on_time_rate=1.0,
            complexity_bonus=3,
        )
        assert calculate_score(factors) == 1.0

    @pytest.mark.parametrize(
        "field, low, high",
        [
            ("completed_projects", 1, 5),
            ("average_rating", 2, 4),
            ("on_time_rate", 0.2, 0.8),
            ("complexity_bonus", 1.5, 2.5),
        ],
    )
    def test_positive_factors_are_monotonic(self, field, low, high):
        base = ReputationFactors(completed_projects=3, average_rating=3, on_time_rate=0.5, complexity_bonus=2)
        lower = base.model_copy(update={field: low})
        higher = base.model_copy(update={field: high})
        assert calculate_score(higher) > calculate_score(lower)

    @pytest.mark.parametrize("field", ["dispute_rate", "rework_rate"])
    def test_penalties_lower_the_score(self, field):
        base = ReputationFactors(completed_projects=3, average_rating=4, on_time_rate=0.8, complexity_bonus=2)
        penalized = base.model_copy(update={field: 0.5})
        assert calculate_score(penalized) < calculate_score(base)


class TestReputationService:
    async def test_reads_portfolio_and_rounds(self, two_items):
        repo = AsyncMock()
        repo.list_by_user.return_value = two_items
        service = ReputationService(repo)

        reputation = await service.calculate_reputation("student-1")

        repo.list_by_user.assert_awaited_once_with("student-1")
        assert reputation.user_id == "student-1"
        assert reputation.score == 0.52
        assert reputation.display_score == 52
        assert reputation.factors.average_rating == pytest.approx(4.75)

    async def test_explicit_items_skip_repository(self, two_items):
        repo = AsyncMock()
        service = ReputationService(repo)

        reputation = await service.calculate_reputation("student-1", items=two_items)

        repo.list_by_user.assert_not_awaited()
        assert reputation.score == 0.52

    async def test_empty_portfolio_scores_zero(self):
        repo = AsyncMock()
        repo.list_by_user.return_value = []
        reputation = await ReputationService(repo).calculate_reputation("newcomer")

        assert reputation.score == 0.0
        assert reputation.factors == ReputationFactors()

    async def test_camel_case_output(self, two_items):
        reputation = await ReputationService(AsyncMock()).calculate_reputation("student-1", items=two_items)
        body = reputation.model_dump(by_alias=True)

        assert "lastCalculatedAt" in body
        assert body["factors"]["averageRating"] == pytest.approx(4.75)
        assert body["factors"]["onTimeRate"] == pytest.approx(0.5)
