from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class ChatMessage:
    nick: str
    msg: str
    created_at: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        """Wire shape shared by replay, new_message and whisper events."""
        return {"nick": self.nick, "msg": self.msg}
