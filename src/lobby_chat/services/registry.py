"""In-memory identity registry: normalized nickname -> connection session."""
from __future__ import annotations

import logging

from lobby_chat.application.exceptions import (
    AlreadyNamedError,
    InvalidFormatError,
    NameTakenError,
)
from lobby_chat.domain.entities.session import ConnectionSession
from lobby_chat.domain.value_objects.enums import SessionState
from lobby_chat.services.validation import normalize_nickname, validate_nickname

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """Owns nickname uniqueness for a single process.

    All methods are synchronous so a uniqueness check and the insert that
    follows it can never interleave with another connection's claim.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ConnectionSession] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def claim(self, raw_name: str, session: ConnectionSession) -> None:
        if session.nickname is not None:
            raise AlreadyNamedError()
        if not validate_nickname(raw_name):
            raise InvalidFormatError()

        key = normalize_nickname(raw_name)
        if key in self._entries:
            raise NameTakenError()

        session.nickname = raw_name.strip()
        session.key = key
        session.state = SessionState.ACTIVE
        self._entries[key] = session
        logger.info("Nickname claimed: %s (connections=%d)", session.nickname, len(self._entries))

    def release(self, session: ConnectionSession) -> bool:
        if session.key is None:
            return False
        current = self._entries.get(session.key)
        if current is not session:
            logger.debug("Stale release ignored for %s", session.key)
            return False
        del self._entries[session.key]
        logger.info("Nickname released: %s", session.nickname)
        return True

    def lookup(self, key: str) -> ConnectionSession | None:
        return self._entries.get(key)

    def roster_names(self) -> list[str]:
        return [s.nickname for s in self._entries.values() if s.nickname is not None]
