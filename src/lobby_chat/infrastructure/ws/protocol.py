"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # claim_name | send_message | ping
    id: str | int | None = None  # echoed back in the ack
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # ack | replay | roster | new_message | whisper | error | pong
    data: dict[str, Any] = {}
