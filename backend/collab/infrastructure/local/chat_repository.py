"""
SQLite implementation of the project chat sink.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import select

from collab.infrastructure.local.database import ChatMessageORM, get_session_factory
from collab.interfaces.chat_repository import IChatRepository
from collab.models.chat import ChatMessage, ChatMessageCreate, ChatMessageKind
from collab.utils.datetime_utils import ensure_utc, now_utc


class SqliteChatRepository(IChatRepository):
    """SQLite implementation of chat repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ChatMessageORM) -> ChatMessage:
        return ChatMessage(
            id=UUID(orm.id),
            project_id=orm.project_id,
            sender_id=orm.sender_id,
            kind=ChatMessageKind(orm.kind),
            content=orm.content,
            reference_id=orm.reference_id,
            created_at=ensure_utc(orm.created_at),
        )

    async def post(self, message: ChatMessageCreate) -> ChatMessage:
        async with self._session_factory() as session:
            orm = ChatMessageORM(
                id=str(uuid4()),
                project_id=message.project_id,
                sender_id=message.sender_id,
                kind=message.kind.value,
                content=message.content,
                reference_id=message.reference_id,
                created_at=now_utc(),
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_by_project(self, project_id: str, limit: int = 100) -> list[ChatMessage]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ChatMessageORM)
                .where(ChatMessageORM.project_id == project_id)
                .order_by(ChatMessageORM.created_at)
                .limit(limit)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]
