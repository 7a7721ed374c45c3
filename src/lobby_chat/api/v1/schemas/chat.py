from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class RosterResponse(BaseModel):
    names: list[str]


class ChatMessageResponse(BaseModel):
    nick: str
    msg: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
