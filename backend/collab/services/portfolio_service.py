"""
Portfolio service.

Auto-creates verified portfolio entries for the students who delivered a
released or completed milestone.
"""

from __future__ import annotations

from typing import Optional

from collab.core.exceptions import InvalidStateError
from collab.core.logger import setup_logger
from collab.interfaces.portfolio_repository import IPortfolioRepository
from collab.interfaces.submission_repository import ISubmissionRepository
from collab.models.enums import Complexity, MilestoneStatus
from collab.models.milestone import Milestone
from collab.models.portfolio import PortfolioItem, PortfolioItemCreate

logger = setup_logger(__name__)

LOW_COMPLEXITY_BELOW = 1000
HIGH_COMPLEXITY_ABOVE = 5000
DELIVERED_STATUSES = {MilestoneStatus.RELEASED, MilestoneStatus.COMPLETED}


def complexity_for_amount(amount: float) -> Complexity:
    if amount < LOW_COMPLEXITY_BELOW:
        return Complexity.LOW
    if amount > HIGH_COMPLEXITY_ABOVE:
        return Complexity.HIGH
    return Complexity.MEDIUM


class PortfolioService:
    """Service for verified portfolio entries."""

    def __init__(
        self,
        portfolio_repo: IPortfolioRepository,
        submission_repo: ISubmissionRepository,
        default_role: str = "Project Contributor",
    ):
        self.portfolio_repo = portfolio_repo
        self.submission_repo = submission_repo
        self.default_role = default_role

    async def get_user_portfolio(self, user_id: str) -> list[PortfolioItem]:
        return await self.portfolio_repo.list_by_user(user_id)

    async def create_for_milestone(
        self,
        milestone: Milestone,
        student_ids: Optional[list[str]] = None,
        role: Optional[str] = None,
        rating: Optional[int] = None,
    ) -> list[PortfolioItem]:
        """
        Create one entry per delivering student.

        Students default to the individual submitters of the milestone. The
        amount is split equally and students who already have an entry for
        this milestone are skipped.
        """
        if milestone.status not in DELIVERED_STATUSES:
            raise InvalidStateError(
                "Can only create portfolio entries for completed milestones",
                current_status=milestone.status.value,
            )

        submissions = await self.submission_repo.list_by_milestone(milestone.id)
        if not student_ids:
            student_ids = [s.by_student_id for s in submissions if s.by_student_id]
        students = list(dict.fromkeys(student_ids))
        if not students:
            logger.info("No students to credit for milestone %s", milestone.id)
            return []

        existing = await self.portfolio_repo.list_user_ids_for_milestone(milestone.id)
        proof: list[str] = []
        for submission in submissions:
            proof.extend(item.url for item in submission.files)
            if submission.work_url:
                proof.append(submission.work_url)

        share = milestone.amount / len(students)
        items = [
            PortfolioItemCreate(
                user_id=student_id,
                project_id=milestone.project_id,
                milestone_id=milestone.id,
                role=role or self.default_role,
                scope=milestone.scope,
                proof=list(dict.fromkeys(proof)),
                rating=rating,
                complexity=complexity_for_amount(milestone.amount),
                amount_delivered=share,
                currency=milestone.currency,
                on_time=milestone.updated_at <= milestone.due_date,
            )
            for student_id in students
            if student_id not in existing
        ]
        if not items:
            return []

        created = await self.portfolio_repo.create_many(items)
        logger.info("Created %d portfolio entries for milestone %s", len(created), milestone.id)
        return created
