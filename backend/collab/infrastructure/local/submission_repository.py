"""
SQLite implementation of the submission repository.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, select, update

from collab.core.exceptions import ConcurrencyError, NotFoundError
from collab.infrastructure.local.database import MilestoneORM, SubmissionORM, get_session_factory
from collab.interfaces.submission_repository import ISubmissionRepository
from collab.models.enums import MilestoneStatus
from collab.models.submission import Submission, SubmissionFile
from collab.utils.datetime_utils import ensure_utc, now_utc


class SqliteSubmissionRepository(ISubmissionRepository):
    """SQLite implementation of submission repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: SubmissionORM) -> Submission:
        return Submission(
            id=UUID(orm.id),
            milestone_id=UUID(orm.milestone_id),
            by_student_id=orm.by_student_id,
            by_group_id=orm.by_group_id,
            notes=orm.notes,
            files=[SubmissionFile.model_validate(item) for item in orm.files or []],
            work_url=orm.work_url,
            submitted_at=ensure_utc(orm.submitted_at),
        )

    @staticmethod
    def _model_to_orm(submission: Submission) -> SubmissionORM:
        return SubmissionORM(
            id=str(submission.id),
            milestone_id=str(submission.milestone_id),
            by_student_id=submission.by_student_id,
            by_group_id=submission.by_group_id,
            notes=submission.notes,
            files=[item.model_dump() for item in submission.files],
            work_url=submission.work_url,
            submitted_at=submission.submitted_at,
        )

    async def add(self, submission: Submission) -> Submission:
        async with self._session_factory() as session:
            orm = self._model_to_orm(submission)
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def add_and_mark_submitted(self, submission: Submission, milestone_version: int) -> Submission:
        milestone_id = str(submission.milestone_id)
        async with self._session_factory() as session:
            orm = self._model_to_orm(submission)
            session.add(orm)
            await session.flush()

            moved = await session.execute(
                update(MilestoneORM)
                .where(and_(MilestoneORM.id == milestone_id, MilestoneORM.version == milestone_version))
                .values(
                    status=MilestoneStatus.SUBMITTED.value,
                    version=milestone_version + 1,
                    updated_at=now_utc(),
                )
                .execution_options(synchronize_session=False)
            )
            if moved.rowcount == 0:
                current = await session.execute(
                    select(MilestoneORM.status).where(MilestoneORM.id == milestone_id)
                )
                current_status = current.scalar_one_or_none()
                await session.rollback()
                if current_status is None:
                    raise NotFoundError(f"Milestone {milestone_id} not found")
                raise ConcurrencyError(
                    f"Milestone {milestone_id} was modified concurrently "
                    f"(expected version {milestone_version})",
                    current_status=current_status,
                )

            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_by_milestone(self, milestone_id: UUID) -> list[Submission]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SubmissionORM)
                .where(SubmissionORM.milestone_id == str(milestone_id))
                .order_by(SubmissionORM.submitted_at)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
