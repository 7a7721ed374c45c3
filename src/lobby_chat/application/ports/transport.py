from __future__ import annotations

from typing import Any, Protocol


class ClientConnection(Protocol):
    """One bidirectional client channel, as seen by the routing core."""

    @property
    def connection_id(self) -> str: ...

    async def send(self, event_type: str, data: dict[str, Any]) -> None: ...
