"""In-process connection manager used for fan-out."""
from __future__ import annotations

import logging
from typing import Any

from lobby_chat.application.ports.transport import ClientConnection

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks every open connection, named or anonymous.

    A connection joins as pending and only receives ``live_only`` broadcasts
    once ``mark_live`` is called, which the router does right after the
    history snapshot is taken.
    """

    def __init__(self) -> None:
        self._connections: dict[str, ClientConnection] = {}
        self._pending: set[str] = set()

    def __len__(self) -> int:
        return len(self._connections)

    def connect(self, conn: ClientConnection, *, live: bool = True) -> None:
        self._connections[conn.connection_id] = conn
        if not live:
            self._pending.add(conn.connection_id)
        logger.debug("Connected: %s (total=%d)", conn.connection_id, len(self._connections))

    def mark_live(self, conn: ClientConnection) -> None:
        self._pending.discard(conn.connection_id)

    def is_live(self, conn: ClientConnection) -> bool:
        return conn.connection_id in self._connections and conn.connection_id not in self._pending

    def disconnect(self, conn: ClientConnection) -> None:
        self._pending.discard(conn.connection_id)
        if self._connections.pop(conn.connection_id, None) is not None:
            logger.debug("Disconnected: %s (total=%d)", conn.connection_id, len(self._connections))

    async def broadcast(
        self,
        event_type: str,
        data: dict[str, Any],
        *,
        exclude: ClientConnection | None = None,
        live_only: bool = False,
    ) -> None:
        """Send an event to every connection, optionally skipping one.

        With ``live_only`` connections still waiting for their replay are
        skipped as well.
        """
        dead: list[ClientConnection] = []
        for conn in list(self._connections.values()):
            if exclude is not None and conn.connection_id == exclude.connection_id:
                continue
            if live_only and conn.connection_id in self._pending:
                continue
            try:
                await conn.send(event_type, data)
            except Exception:
                logger.debug("Send to %s failed, dropping", conn.connection_id, exc_info=True)
                dead.append(conn)
        for conn in dead:
            self.disconnect(conn)

    async def send_to(
        self,
        conn: ClientConnection,
        event_type: str,
        data: dict[str, Any],
    ) -> bool:
        """Send an event to a single connection. Returns False if it is gone."""
        try:
            await conn.send(event_type, data)
        except Exception:
            logger.debug("Send to %s failed, dropping", conn.connection_id, exc_info=True)
            self.disconnect(conn)
            return False
        return True
