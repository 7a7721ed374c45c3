from __future__ import annotations

import asyncio
import logging

from lobby_chat.application.exceptions import HistoryUnavailableError
from lobby_chat.application.repositories.message import MessageStore
from lobby_chat.domain.entities.message import ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class HistoryLoader:
    """Fetches recent public messages in chronological order."""

    def __init__(
        self,
        store: MessageStore | None,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
        timeout: float = 5.0,
    ) -> None:
        self.store = store
        self.limit = limit
        self._timeout = timeout

    async def load(self, limit: int | None = None) -> list[ChatMessage]:
        """Return up to ``limit`` messages, oldest first.

        Raises HistoryUnavailableError on any store failure or timeout.
        """
        if self.store is None:
            return []
        size = min(limit or self.limit, self.limit)
        try:
            async with asyncio.timeout(self._timeout):
                recent = await self.store.find_recent(size)
        except Exception as exc:
            logger.warning("History load failed: %r", exc)
            raise HistoryUnavailableError() from exc
        return list(reversed(recent))
