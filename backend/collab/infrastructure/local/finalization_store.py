"""
SQLite implementation of the finalize hand-off.

Both writes share one session and one commit.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError

from collab.core.exceptions import ConcurrencyError, NotFoundError
from collab.core.logger import setup_logger
from collab.infrastructure.local.database import MilestoneORM, ProposalORM, get_session_factory
from collab.infrastructure.local.milestone_repository import (
    milestone_create_to_orm,
    milestone_orm_to_model,
)
from collab.interfaces.finalization_store import IFinalizationStore
from collab.models.enums import ProposalStatus
from collab.models.milestone import Milestone, MilestoneCreate
from collab.utils.datetime_utils import now_utc

logger = setup_logger(__name__)


class SqliteFinalizationStore(IFinalizationStore):
    """Creates the milestone and finalizes its proposal atomically."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def finalize(
        self,
        proposal_id: UUID,
        expected_version: int,
        milestone: MilestoneCreate,
    ) -> Milestone:
        async with self._session_factory() as session:
            proposal = await session.get(ProposalORM, str(proposal_id))
            if not proposal:
                raise NotFoundError(f"Proposal {proposal_id} not found")
            read_status = proposal.status

            result = await session.execute(
                select(MilestoneORM).where(MilestoneORM.source_proposal_id == str(proposal_id))
            )
            existing = result.scalar_one_or_none()
            if existing:
                if proposal.status != ProposalStatus.FINALIZED.value:
                    logger.warning(
                        "Repairing proposal %s: milestone %s exists but status is %s",
                        proposal_id,
                        existing.id,
                        proposal.status,
                    )
                    now = now_utc()
                    proposal.status = ProposalStatus.FINALIZED.value
                    proposal.milestone_id = existing.id
                    proposal.finalized_by = proposal.finalized_by or milestone.finalized_by
                    proposal.finalized_at = proposal.finalized_at or now
                    proposal.updated_at = now
                    proposal.version = proposal.version + 1
                    await session.commit()
                return milestone_orm_to_model(existing)

            orm = milestone_create_to_orm(milestone)
            session.add(orm)
            try:
                await session.flush()
            except IntegrityError as exc:
                await session.rollback()
                raise ConcurrencyError(
                    f"Proposal {proposal_id} was already finalized by another request",
                    current_status=ProposalStatus.FINALIZED.value,
                ) from exc

            now = now_utc()
            updated = await session.execute(
                update(ProposalORM)
                .where(
                    and_(
                        ProposalORM.id == str(proposal_id),
                        ProposalORM.version == expected_version,
                    )
                )
                .values(
                    status=ProposalStatus.FINALIZED.value,
                    milestone_id=orm.id,
                    finalized_by=milestone.finalized_by,
                    finalized_at=now,
                    updated_at=now,
                    version=expected_version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if updated.rowcount == 0:
                await session.rollback()
                raise ConcurrencyError(
                    f"Proposal {proposal_id} was modified concurrently "
                    f"(expected version {expected_version})",
                    current_status=read_status,
                )

            await session.commit()

            await session.refresh(orm)
            return milestone_orm_to_model(orm)
