from __future__ import annotations

import uuid
from typing import Any

from fastapi import WebSocket

from lobby_chat.infrastructure.ws.protocol import WsOutbound


class WebSocketConnection:
    """Adapts a FastAPI WebSocket to the ClientConnection port."""

    def __init__(self, websocket: WebSocket) -> None:
        self._ws = websocket
        self._id = uuid.uuid4().hex

    @property
    def connection_id(self) -> str:
        return self._id

    async def send(self, event_type: str, data: dict[str, Any]) -> None:
        await self._ws.send_text(WsOutbound(type=str(event_type), data=data).model_dump_json())
