"""Presence and message routing for the single chat room."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from lobby_chat.application.dto.results import ClaimResult, SendResult
from lobby_chat.application.exceptions import (
    AppError,
    ConnectionClosedError,
    EmptyMessageError,
    HistoryUnavailableError,
    MalformedWhisperError,
    NotAuthenticatedError,
    PersistenceFailedError,
    RateLimitedError,
    SelfWhisperError,
    TargetOfflineError,
)
from lobby_chat.application.ports.clock import Clock, MonotonicClock
from lobby_chat.application.ports.transport import ClientConnection
from lobby_chat.application.repositories.message import MessageStore
from lobby_chat.domain.entities.message import ChatMessage
from lobby_chat.domain.entities.session import ConnectionSession
from lobby_chat.domain.value_objects.enums import OutboundEvent, SessionState
from lobby_chat.infrastructure.ws.manager import ConnectionManager
from lobby_chat.services.history import HistoryLoader
from lobby_chat.services.rate_limiter import RateLimiter
from lobby_chat.services.registry import IdentityRegistry
from lobby_chat.services.validation import (
    is_whisper,
    normalize_nickname,
    parse_whisper,
    sanitize_message,
)

logger = logging.getLogger(__name__)


class ChatRouter:
    """Drives each connection through ANONYMOUS -> ACTIVE -> DISCONNECTED.

    Every request returns a result object; taxonomy errors never escape.
    When ``store`` is None the room runs ephemerally: public messages are
    broadcast unsaved and replays are empty.
    """

    def __init__(
        self,
        registry: IdentityRegistry,
        manager: ConnectionManager,
        store: MessageStore | None,
        *,
        history: HistoryLoader | None = None,
        rate_limiter: RateLimiter | None = None,
        clock: Clock | None = None,
        persist_timeout: float = 5.0,
        echo_to_sender: bool = True,
    ) -> None:
        self.registry = registry
        self.manager = manager
        self._store = store
        self._history = history or HistoryLoader(store)
        self._rate_limiter = rate_limiter or RateLimiter()
        self._clock = clock or MonotonicClock()
        self._persist_timeout = persist_timeout
        self._echo_to_sender = echo_to_sender

    @property
    def persistent(self) -> bool:
        return self._store is not None

    def go_ephemeral(self) -> None:
        """Stop using the store: unsaved broadcasts and empty replays."""
        self._store = None
        self._history.store = None

    # -- lifecycle -----------------------------------------------------------

    async def on_connect(self, connection: ClientConnection) -> ConnectionSession:
        # Pending until its replay snapshot is taken, see replay_history.
        self.manager.connect(connection, live=False)
        return ConnectionSession(connection=connection)

    async def replay_history(self, session: ConnectionSession) -> None:
        """Send the recent-history replay to this connection only.

        The connection goes live for public messages between the snapshot
        and the replay send, with no await in between, so every public
        message reaches it exactly once and after the replay.
        """
        try:
            messages = await self._history.load()
        except HistoryUnavailableError:
            logger.warning("Replaying empty history to %s", session.id)
            messages = []
        if session.state == SessionState.DISCONNECTED:
            return
        self.manager.mark_live(session.connection)
        await self.manager.send_to(
            session.connection,
            OutboundEvent.REPLAY,
            {"messages": [m.to_payload() for m in messages]},
        )

    async def on_disconnect(self, session: ConnectionSession) -> None:
        if session.state == SessionState.DISCONNECTED:
            return
        session.state = SessionState.DISCONNECTED
        self.manager.disconnect(session.connection)
        if self.registry.release(session):
            await self.broadcast_roster()

    # -- requests ------------------------------------------------------------

    async def claim_name(
        self,
        session: ConnectionSession,
        raw_name: Any,
        ack: Callable[[ClaimResult], Awaitable[None]] | None = None,
    ) -> ClaimResult:
        """Claim a nickname. ``ack`` runs before the roster broadcast."""
        try:
            if session.state == SessionState.DISCONNECTED:
                raise ConnectionClosedError()
            self.registry.claim(raw_name, session)
        except AppError as exc:
            logger.debug("Claim rejected for %s: %s", session.id, exc.code)
            result = ClaimResult(success=False, reason=exc.code, detail=exc.detail)
        else:
            result = ClaimResult(success=True)

        if ack is not None:
            await ack(result)
        if result.success:
            await self.broadcast_roster()
        return result

    async def send_message(self, session: ConnectionSession, raw_body: Any) -> SendResult:
        try:
            await self._route(session, raw_body)
        except AppError as exc:
            logger.debug("Send rejected for %s: %s", session.id, exc.code)
            return SendResult(error=exc.code, detail=exc.detail)
        return SendResult()

    async def broadcast_roster(self) -> None:
        await self.manager.broadcast(
            OutboundEvent.ROSTER, {"names": self.registry.roster_names()},
        )

    # -- internals -----------------------------------------------------------

    async def _route(self, session: ConnectionSession, raw_body: Any) -> None:
        if not session.is_active:
            raise NotAuthenticatedError()
        if not self._rate_limiter.try_consume(session, self._clock.now_ms()):
            raise RateLimitedError()

        body = sanitize_message(raw_body)
        if not body:
            raise EmptyMessageError()

        if is_whisper(body):
            await self._whisper(session, body)
        else:
            await self._publish(session, body)

    async def _whisper(self, session: ConnectionSession, body: str) -> None:
        command = parse_whisper(body)
        if command is None:
            raise MalformedWhisperError()
        if not command.content:
            raise EmptyMessageError()

        target_key = normalize_nickname(command.target)
        target = self.registry.lookup(target_key)
        if target is None:
            raise TargetOfflineError()
        if target_key == session.key:
            raise SelfWhisperError()

        message = ChatMessage(nick=session.nickname or "", msg=command.content)
        delivered = await self.manager.send_to(
            target.connection, OutboundEvent.WHISPER, message.to_payload(),
        )
        if not delivered:
            raise TargetOfflineError()

    async def _publish(self, session: ConnectionSession, body: str) -> None:
        message = ChatMessage(nick=session.nickname or "", msg=body)
        if self._store is not None:
            try:
                async with asyncio.timeout(self._persist_timeout):
                    message = await self._store.save(message)
            except Exception as exc:
                logger.warning("Persisting message from %s failed: %r", session.nickname, exc)
                raise PersistenceFailedError() from exc

        exclude = None if self._echo_to_sender else session.connection
        await self.manager.broadcast(
            OutboundEvent.NEW_MESSAGE, message.to_payload(), exclude=exclude, live_only=True,
        )
