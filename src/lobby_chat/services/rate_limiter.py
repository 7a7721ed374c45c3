from __future__ import annotations

from lobby_chat.domain.entities.session import ConnectionSession

DEFAULT_MIN_INTERVAL_MS = 300


class RateLimiter:
    """Minimum-interval gate on message submission, one window per session."""

    def __init__(self, min_interval_ms: float = DEFAULT_MIN_INTERVAL_MS) -> None:
        self.min_interval_ms = min_interval_ms

    def try_consume(self, session: ConnectionSession, now_ms: float) -> bool:
        # Check and update run without an await in between.
        last = session.last_sent_at
        if last is not None and now_ms - last < self.min_interval_ms:
            return False
        session.last_sent_at = now_ms
        return True
