"""Shared test fixtures."""
from __future__ import annotations

import pytest

from lobby_chat.domain.entities.session import ConnectionSession
from lobby_chat.infrastructure.ws.manager import ConnectionManager
from lobby_chat.services.chat_router import ChatRouter
from lobby_chat.services.history import HistoryLoader
from lobby_chat.services.rate_limiter import RateLimiter
from lobby_chat.services.registry import IdentityRegistry
from tests.fakes import FakeClock, FakeConnection, FakeMessageStore


@pytest.fixture
def registry() -> IdentityRegistry:
    return IdentityRegistry()


@pytest.fixture
def manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def store() -> FakeMessageStore:
    return FakeMessageStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def chat(registry, manager, store, clock) -> ChatRouter:
    return ChatRouter(
        registry,
        manager,
        store,
        history=HistoryLoader(store),
        rate_limiter=RateLimiter(300),
        clock=clock,
    )


def make_session() -> ConnectionSession:
    return ConnectionSession(connection=FakeConnection())


async def join(chat: ChatRouter, name: str | None = None) -> tuple[ConnectionSession, FakeConnection]:
    """Connect a fake client, replay history and optionally claim a nickname."""
    conn = FakeConnection()
    session = await chat.on_connect(conn)
    await chat.replay_history(session)
    if name is not None:
        result = await chat.claim_name(session, name)
        assert result.success, result
    return session, conn
