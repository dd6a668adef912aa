"""
SQLite implementation of the portfolio repository.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import select

from collab.infrastructure.local.database import PortfolioItemORM, get_session_factory
from collab.interfaces.portfolio_repository import IPortfolioRepository
from collab.models.enums import Complexity
from collab.models.portfolio import PortfolioItem, PortfolioItemCreate
from collab.utils.datetime_utils import ensure_utc, now_utc


class SqlitePortfolioRepository(IPortfolioRepository):
    """SQLite implementation of portfolio repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: PortfolioItemORM) -> PortfolioItem:
        return PortfolioItem(
            id=UUID(orm.id),
            user_id=orm.user_id,
            project_id=orm.project_id,
            milestone_id=UUID(orm.milestone_id) if orm.milestone_id else None,
            role=orm.role,
            scope=orm.scope,
            proof=list(orm.proof or []),
            rating=orm.rating,
            complexity=Complexity(orm.complexity),
            amount_delivered=orm.amount_delivered,
            currency=orm.currency,
            on_time=bool(orm.on_time),
            verified_at=ensure_utc(orm.verified_at),
            created_at=ensure_utc(orm.created_at),
        )

    async def create_many(self, items: list[PortfolioItemCreate]) -> list[PortfolioItem]:
        async with self._session_factory() as session:
            now = now_utc()
            orms = []
            for item in items:
                orm = PortfolioItemORM(
                    id=str(uuid4()),
                    user_id=item.user_id,
                    project_id=item.project_id,
                    milestone_id=str(item.milestone_id) if item.milestone_id else None,
                    role=item.role,
                    scope=item.scope,
                    proof=list(item.proof),
                    rating=item.rating,
                    complexity=item.complexity.value,
                    amount_delivered=item.amount_delivered,
                    currency=item.currency,
                    on_time=item.on_time,
                    verified_at=now,
                    created_at=now,
                )
                session.add(orm)
                orms.append(orm)
            await session.commit()
            for orm in orms:
                await session.refresh(orm)
            return [self._orm_to_model(orm) for orm in orms]

    async def list_by_user(self, user_id: str) -> list[PortfolioItem]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PortfolioItemORM)
                .where(PortfolioItemORM.user_id == user_id)
                .order_by(PortfolioItemORM.created_at.desc())
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_user_ids_for_milestone(self, milestone_id: UUID) -> set[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PortfolioItemORM.user_id).where(
                    PortfolioItemORM.milestone_id == str(milestone_id)
                )
            )
            return set(result.scalars().all())
