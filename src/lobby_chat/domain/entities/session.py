from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from lobby_chat.application.ports.transport import ClientConnection
from lobby_chat.domain.value_objects.enums import SessionState


@dataclass(eq=False, slots=True)
class ConnectionSession:
    """Server-side identity of one transport connection.

    Compared by identity: two sessions are never equal even if they carry the
    same nickname, which is what lets the registry ignore stale releases.
    """

    connection: ClientConnection
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    nickname: str | None = None
    key: str | None = None
    last_sent_at: float | None = None
    state: SessionState = SessionState.ANONYMOUS

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE
