from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lobby_chat.domain.entities.message import ChatMessage
from lobby_chat.infrastructure.db.mappers import message as mapper
from lobby_chat.infrastructure.db.models.message import ChatMessageModel


class SqlAlchemyMessageStore:
    """Implements application.repositories.message.MessageStore.

    Each call runs in its own session so concurrent connections never share
    one.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, message: ChatMessage) -> ChatMessage:
        async with self._session_factory() as session:
            model = mapper.entity_to_model(message)
            session.add(model)
            await session.commit()
            return mapper.model_to_entity(model)

    async def find_recent(self, limit: int = 50) -> list[ChatMessage]:
        stmt = (
            select(ChatMessageModel)
            .order_by(ChatMessageModel.created_at.desc(), ChatMessageModel.id.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [mapper.model_to_entity(m) for m in result.scalars().all()]
