"""Integration tests for the HTTP and WebSocket surface (in-memory store)."""
from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient

from lobby_chat.app import create_app
from lobby_chat.config import Settings
from lobby_chat.domain.entities.message import ChatMessage
from tests.fakes import FakeMessageStore


@pytest.fixture
def store() -> FakeMessageStore:
    return FakeMessageStore(
        messages=[ChatMessage(nick="alice", msg="first"), ChatMessage(nick="bob", msg="second")],
    )


@pytest.fixture
def client(store):
    app = create_app(Settings(_env_file=None, DATABASE_URL=None), store=store)
    return TestClient(app, raise_server_exceptions=False)


def _claim(ws, name: str, ack_id: str = "c1") -> dict:
    ws.send_json({"type": "claim_name", "id": ack_id, "data": {"name": name}})
    return ws.receive_json()


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_readyz_without_database(client):
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ready", "database": "disabled"}


def test_recent_messages_oldest_first(client):
    resp = client.get("/api/v1/chat/messages")
    assert resp.status_code == 200
    assert [m["msg"] for m in resp.json()] == ["first", "second"]


def test_recent_messages_limit_is_bounded(client):
    assert client.get("/api/v1/chat/messages?limit=51").status_code == 422
    assert [m["msg"] for m in client.get("/api/v1/chat/messages?limit=1").json()] == ["second"]


def test_recent_messages_unavailable(client, store):
    store.fail_find = True
    resp = client.get("/api/v1/chat/messages")
    assert resp.status_code == 503
    assert resp.json()["code"] == "HistoryUnavailable"


def test_ws_replay_on_connect(client):
    with client.websocket_connect("/ws/chat") as ws:
        event = ws.receive_json()

    assert event == {
        "type": "replay",
        "data": {"messages": [{"nick": "alice", "msg": "first"}, {"nick": "bob", "msg": "second"}]},
    }


def test_ws_claim_and_roster(client):
    with client.websocket_connect("/ws/chat") as ws:
        ws.receive_json()  # replay

        ack = _claim(ws, "alice")
        roster = ws.receive_json()

    assert ack == {
        "type": "ack",
        "data": {"id": "c1", "success": True, "reason": None, "detail": None},
    }
    assert roster == {"type": "roster", "data": {"names": ["alice"]}}


def test_ws_duplicate_claim_is_rejected(client):
    with client.websocket_connect("/ws/chat") as a, client.websocket_connect("/ws/chat") as b:
        a.receive_json()
        b.receive_json()
        _claim(a, "alice")
        a.receive_json()  # roster
        b.receive_json()  # roster

        ack = _claim(b, "Alice ", ack_id="c2")

    assert ack["data"]["id"] == "c2"
    assert ack["data"]["success"] is False
    assert ack["data"]["reason"] == "NameTaken"


def test_ws_send_requires_name(client):
    with client.websocket_connect("/ws/chat") as ws:
        ws.receive_json()
        ws.send_json({"type": "send_message", "id": "m1", "data": {"body": "hi"}})
        ack = ws.receive_json()

    assert ack["type"] == "ack"
    assert ack["data"]["id"] == "m1"
    assert ack["data"]["error"] == "NotAuthenticated"


def test_ws_public_message_and_roster_on_leave(client, store):
    with client.websocket_connect("/ws/chat") as a:
        a.receive_json()
        _claim(a, "alice")
        a.receive_json()  # roster [alice]

        with client.websocket_connect("/ws/chat") as b:
            b.receive_json()
            _claim(b, "bob")
            b.receive_json()  # roster [alice, bob]
            assert a.receive_json() == {"type": "roster", "data": {"names": ["alice", "bob"]}}

            a.send_json({"type": "send_message", "id": "m1", "data": {"body": "hello bob"}})
            assert a.receive_json() == {"type": "new_message", "data": {"nick": "alice", "msg": "hello bob"}}
            assert a.receive_json()["data"] == {"id": "m1", "error": None, "detail": None}
            assert b.receive_json() == {"type": "new_message", "data": {"nick": "alice", "msg": "hello bob"}}

        assert a.receive_json() == {"type": "roster", "data": {"names": ["alice"]}}

    assert store.messages[-1].msg == "hello bob"


def test_ws_whisper(client, store):
    with client.websocket_connect("/ws/chat") as a, client.websocket_connect("/ws/chat") as b:
        a.receive_json()
        b.receive_json()
        _claim(a, "alice")
        a.receive_json()
        b.receive_json()
        _claim(b, "bob")
        b.receive_json()
        a.receive_json()

        a.send_json({"type": "send_message", "id": "w1", "data": {"body": "/w BOB  secret"}})
        ack = a.receive_json()
        whisper = b.receive_json()

    assert ack["data"]["error"] is None
    assert whisper == {"type": "whisper", "data": {"nick": "alice", "msg": "secret"}}
    assert [m.msg for m in store.messages] == ["first", "second"]


def test_ws_invalid_and_unknown_frames(client):
    with client.websocket_connect("/ws/chat") as ws:
        ws.receive_json()
        ws.send_text("not json")
        invalid = ws.receive_json()
        ws.send_json({"type": "shout", "data": {}})
        unknown = ws.receive_json()
        ws.send_json({"type": "ping"})
        pong = ws.receive_json()

    assert invalid == {"type": "error", "data": {"code": "invalid_payload"}}
    assert unknown == {"type": "error", "data": {"code": "unknown_type", "type": "shout"}}
    assert pong == {"type": "pong", "data": {}}


def test_ws_numeric_ack_id_is_echoed(client):
    with client.websocket_connect("/ws/chat") as ws:
        ws.receive_json()
        ws.send_json({"type": "send_message", "id": 7, "data": {"body": "hi"}})
        ack = ws.receive_json()

    assert ack["type"] == "ack"
    assert ack["data"]["id"] == 7


def test_unreachable_store_degrades_to_ephemeral_chat():
    cfg = Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:////nonexistent-dir/chat.db",
        DB_CONNECT_RETRIES=1,
        DB_CONNECT_RETRY_DELAY=0,
    )
    app = create_app(cfg)

    with TestClient(app) as client:
        deadline = time.monotonic() + 5
        while app.state.chat_router.persistent and time.monotonic() < deadline:
            time.sleep(0.01)
        assert app.state.chat_router.persistent is False

        with client.websocket_connect("/ws/chat") as ws:
            assert ws.receive_json() == {"type": "replay", "data": {"messages": []}}
            _claim(ws, "alice")
            ws.receive_json()  # roster
            ws.send_json({"type": "send_message", "id": "m", "data": {"body": "hi"}})
            message = ws.receive_json()
            ack = ws.receive_json()

    assert message == {"type": "new_message", "data": {"nick": "alice", "msg": "hi"}}
    assert ack["data"] == {"id": "m", "error": None, "detail": None}
