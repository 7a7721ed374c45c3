from __future__ import annotations

from typing import Protocol

from lobby_chat.domain.entities.message import ChatMessage


class MessageStore(Protocol):
    async def save(self, message: ChatMessage) -> ChatMessage:
        """Persist a public message. The returned copy carries created_at."""
        ...

    async def find_recent(self, limit: int = 50) -> list[ChatMessage]:
        """Most recent messages, newest first."""
        ...
