"""
SQLite implementation of Milestone repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select, update as sql_update

from collab.core.exceptions import ConcurrencyError, NotFoundError
from collab.infrastructure.local.database import MilestoneORM, get_session_factory
from collab.interfaces.milestone_repository import IMilestoneRepository
from collab.models.enums import EscrowStatus, MilestoneStatus
from collab.models.milestone import Milestone, MilestoneCreate, MilestoneUpdate
from collab.utils.datetime_utils import ensure_utc, now_utc


def milestone_orm_to_model(orm: MilestoneORM) -> Milestone:
    """Convert ORM object to Pydantic model."""
    return Milestone(
        id=UUID(orm.id),
        project_id=orm.project_id,
        source_proposal_id=UUID(orm.source_proposal_id) if orm.source_proposal_id else None,
        title=orm.title,
        scope=orm.scope,
        acceptance_criteria=orm.acceptance_criteria,
        due_date=ensure_utc(orm.due_date),
        amount=orm.amount,
        currency=orm.currency,
        escrow_status=EscrowStatus(orm.escrow_status),
        supervisor_gate=bool(orm.supervisor_gate),
        status=MilestoneStatus(orm.status),
        finalized_by=orm.finalized_by,
        review_notes=orm.review_notes,
        progress_readiness=orm.progress_readiness,
        version=orm.version,
        created_at=ensure_utc(orm.created_at),
        updated_at=ensure_utc(orm.updated_at),
    )


def milestone_create_to_orm(milestone: MilestoneCreate) -> MilestoneORM:
    """Build a new ORM row from a create payload."""
    now = now_utc()
    return MilestoneORM(
        id=str(uuid4()),
        project_id=milestone.project_id,
        source_proposal_id=str(milestone.source_proposal_id) if milestone.source_proposal_id else None,
        title=milestone.title,
        scope=milestone.scope,
        acceptance_criteria=milestone.acceptance_criteria,
        due_date=milestone.due_date,
        amount=milestone.amount,
        currency=milestone.currency,
        escrow_status=milestone.escrow_status.value,
        supervisor_gate=milestone.supervisor_gate,
        status=milestone.status.value,
        finalized_by=milestone.finalized_by,
        version=1,
        created_at=now,
        updated_at=now,
    )


class SqliteMilestoneRepository(IMilestoneRepository):
    """SQLite implementation of milestone repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    async def create(self, milestone: MilestoneCreate) -> Milestone:
        """Create a new milestone."""
        async with self._session_factory() as session:
            orm = milestone_create_to_orm(milestone)
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return milestone_orm_to_model(orm)

    async def get(self, milestone_id: UUID) -> Milestone | None:
        async with self._session_factory() as session:
            orm = await session.get(MilestoneORM, str(milestone_id))
            return milestone_orm_to_model(orm) if orm else None

    async def get_by_source_proposal(self, proposal_id: UUID) -> Milestone | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.source_proposal_id == str(proposal_id))
            )
            orm = result.scalar_one_or_none()
            return milestone_orm_to_model(orm) if orm else None

    async def list_by_project(self, project_id: str) -> list[Milestone]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MilestoneORM)
                .where(MilestoneORM.project_id == project_id)
                .order_by(MilestoneORM.due_date, MilestoneORM.created_at)
            )
            return [milestone_orm_to_model(orm) for orm in result.scalars().all()]

    async def update(
        self,
        milestone_id: UUID,
        update: MilestoneUpdate,
        expected_version: Optional[int] = None,
    ) -> Milestone:
        values = {}
        for field, value in update.model_dump(exclude_unset=True).items():
            if value is not None:
                if hasattr(value, "value"):
                    value = value.value
                values[field] = value
        values["version"] = MilestoneORM.version + 1
        values["updated_at"] = now_utc()

        condition = MilestoneORM.id == str(milestone_id)
        if expected_version is not None:
            condition = and_(condition, MilestoneORM.version == expected_version)

        async with self._session_factory() as session:
            result = await session.execute(
                sql_update(MilestoneORM)
                .where(condition)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                current = await session.execute(
                    select(MilestoneORM.version).where(MilestoneORM.id == str(milestone_id))
                )
                current_version = current.scalar_one_or_none()
                await session.rollback()
                if current_version is None:
                    raise NotFoundError(f"Milestone {milestone_id} not found")
                raise ConcurrencyError(
                    f"Milestone {milestone_id} was modified concurrently "
                    f"(expected version {expected_version}, found {current_version})"
                )
            await session.commit()

            orm = await session.get(MilestoneORM, str(milestone_id))
            return milestone_orm_to_model(orm)

    async def delete(self, milestone_id: UUID) -> bool:
        """Delete a milestone. Returns True if deleted, False if not found."""
        async with self._session_factory() as session:
            orm = await session.get(MilestoneORM, str(milestone_id))
            if not orm:
                return False
            await session.delete(orm)
            await session.commit()
            return True
