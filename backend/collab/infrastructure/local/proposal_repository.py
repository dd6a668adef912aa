"""
SQLite implementation of the milestone proposal repository.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select, update

from collab.core.exceptions import ConcurrencyError, NotFoundError
from collab.infrastructure.local.database import ProposalORM, get_session_factory
from collab.interfaces.proposal_repository import IProposalRepository
from collab.models.enums import ProposalStatus
from collab.models.proposal import MilestoneProposal
from collab.utils.datetime_utils import ensure_utc, now_utc


def _to_column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    return value


def proposal_orm_to_model(orm: ProposalORM) -> MilestoneProposal:
    """Convert ORM object to Pydantic model."""
    return MilestoneProposal(
        id=UUID(orm.id),
        project_id=orm.project_id,
        proposer_id=orm.proposer_id,
        title=orm.title,
        scope=orm.scope,
        acceptance_criteria=orm.acceptance_criteria,
        due_date=ensure_utc(orm.due_date),
        amount=orm.amount,
        status=ProposalStatus(orm.status),
        version=orm.version,
        accepted_by=orm.accepted_by,
        accepted_at=ensure_utc(orm.accepted_at),
        finalized_by=orm.finalized_by,
        finalized_at=ensure_utc(orm.finalized_at),
        milestone_id=UUID(orm.milestone_id) if orm.milestone_id else None,
        created_at=ensure_utc(orm.created_at),
        updated_at=ensure_utc(orm.updated_at),
    )


class SqliteProposalRepository(IProposalRepository):
    """SQLite implementation of proposal repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

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
        async with self._session_factory() as session:
            now = now_utc()
            orm = ProposalORM(
                id=str(uuid4()),
                project_id=project_id,
                proposer_id=proposer_id,
                title=title,
                scope=scope,
                acceptance_criteria=acceptance_criteria,
                due_date=due_date,
                amount=amount,
                status=ProposalStatus.PROPOSED.value,
                version=1,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return proposal_orm_to_model(orm)

    async def get(self, proposal_id: UUID) -> Optional[MilestoneProposal]:
        async with self._session_factory() as session:
            orm = await session.get(ProposalORM, str(proposal_id))
            return proposal_orm_to_model(orm) if orm else None

    async def list_by_project(self, project_id: str) -> list[MilestoneProposal]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ProposalORM)
                .where(ProposalORM.project_id == project_id)
                .order_by(ProposalORM.created_at.desc())
            )
            return [proposal_orm_to_model(orm) for orm in result.scalars().all()]

    async def update(
        self,
        proposal_id: UUID,
        expected_version: int,
        changes: dict[str, Any],
    ) -> MilestoneProposal:
        values = {field: _to_column_value(value) for field, value in changes.items()}
        values["version"] = expected_version + 1
        values["updated_at"] = now_utc()

        async with self._session_factory() as session:
            result = await session.execute(
                update(ProposalORM)
                .where(
                    and_(
                        ProposalORM.id == str(proposal_id),
                        ProposalORM.version == expected_version,
                    )
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                current = await session.execute(
                    select(ProposalORM.version).where(ProposalORM.id == str(proposal_id))
                )
                current_version = current.scalar_one_or_none()
                await session.rollback()
                if current_version is None:
                    raise NotFoundError(f"Proposal {proposal_id} not found")
                raise ConcurrencyError(
                    f"Proposal {proposal_id} was modified concurrently "
                    f"(expected version {expected_version}, found {current_version})"
                )
            await session.commit()

            orm = await session.get(ProposalORM, str(proposal_id))
            return proposal_orm_to_model(orm)

    async def delete(self, proposal_id: UUID) -> bool:
        async with self._session_factory() as session:
            orm = await session.get(ProposalORM, str(proposal_id))
            if not orm:
                return False
            await session.delete(orm)
            await session.commit()
            return True
