"""
SQLite-backed inbox store.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import desc, func, select, update

from collab.infrastructure.local.database import NotificationORM, get_session_factory
from collab.interfaces.notification_repository import INotificationRepository
from collab.models.notification import Notification, NotificationCreate, NotificationType
from collab.utils.datetime_utils import ensure_utc, now_utc


def _unread_for(user_id: str):
    return (NotificationORM.user_id == user_id, NotificationORM.is_read.is_(False))


class SqliteNotificationRepository(INotificationRepository):
    """Notifications are append-only apart from the read flag."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    @staticmethod
    def _to_model(row: NotificationORM) -> Notification:
        return Notification(
            id=UUID(row.id),
            user_id=row.user_id,
            type=NotificationType(row.type),
            title=row.title,
            message=row.message,
            link_type=row.link_type,
            link_id=row.link_id,
            project_id=row.project_id,
            is_read=bool(row.is_read),
            read_at=ensure_utc(row.read_at),
            created_at=ensure_utc(row.created_at),
        )

    async def create_bulk(self, notifications: list[NotificationCreate]) -> list[Notification]:
        created_at = now_utc()
        rows = [
            NotificationORM(
                id=str(uuid4()),
                is_read=False,
                read_at=None,
                created_at=created_at,
                **{**item.model_dump(), "type": item.type.value},
            )
            for item in notifications
        ]
        async with self._session_factory() as session:
            session.add_all(rows)
            await session.commit()
            return [self._to_model(row) for row in rows]

    async def list(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Notification]:
        filters = _unread_for(user_id) if unread_only else (NotificationORM.user_id == user_id,)
        stmt = (
            select(NotificationORM)
            .where(*filters)
            .order_by(desc(NotificationORM.created_at))
            .offset(offset)
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [self._to_model(row) for row in rows]

    async def mark_as_read(self, user_id: str, notification_id: UUID) -> Optional[Notification]:
        async with self._session_factory() as session:
            row = await session.get(NotificationORM, str(notification_id))
            # Someone else's notification reads as missing.
            if row is None or row.user_id != user_id:
                return None
            if not row.is_read:
                row.is_read = True
                row.read_at = now_utc()
                await session.commit()
            return self._to_model(row)

    async def get_unread_count(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(NotificationORM).where(*_unread_for(user_id))
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one()

    async def mark_all_as_read(self, user_id: str) -> int:
        stmt = update(NotificationORM).where(*_unread_for(user_id)).values(is_read=True, read_at=now_utc())
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount
