from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from lobby_chat.api.deps import ChatRouterDep
from lobby_chat.application.dto.results import ClaimResult
from lobby_chat.domain.entities.session import ConnectionSession
from lobby_chat.domain.value_objects.enums import InboundEvent, OutboundEvent
from lobby_chat.infrastructure.ws.connection import WebSocketConnection
from lobby_chat.infrastructure.ws.protocol import WsInbound
from lobby_chat.services.chat_router import ChatRouter

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/ws/chat")
async def ws_chat(websocket: WebSocket, chat: ChatRouterDep) -> None:
    await websocket.accept()
    conn = WebSocketConnection(websocket)
    session = await chat.on_connect(conn)
    logger.info("WS connected: %s", session.id)

    interval = websocket.app.state.settings.WS_HEARTBEAT_SECONDS
    replay_task = asyncio.create_task(
        chat.replay_history(session), name=f"ws-replay-{session.id}",
    )
    heartbeat_task = asyncio.create_task(
        _heartbeat(conn, interval), name=f"ws-heartbeat-{session.id}",
    )
    try:
        await _read_loop(websocket, conn, chat, session)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", session.id)
    finally:
        for task in (replay_task, heartbeat_task):
            task.cancel()
        for task in (replay_task, heartbeat_task):
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        await chat.on_disconnect(session)
        logger.info("WS disconnected: %s (%s)", session.id, session.nickname or "anonymous")


async def _heartbeat(conn: WebSocketConnection, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        await conn.send(OutboundEvent.PONG, {})


async def _read_loop(
    ws: WebSocket,
    conn: WebSocketConnection,
    chat: ChatRouter,
    session: ConnectionSession,
) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except ValidationError:
            await conn.send(OutboundEvent.ERROR, {"code": "invalid_payload"})
            continue

        if msg.type == InboundEvent.PING:
            await conn.send(OutboundEvent.PONG, {})

        elif msg.type == InboundEvent.CLAIM_NAME:
            async def _claim_ack(result: ClaimResult) -> None:
                await _ack(conn, msg, result.to_ack())

            await chat.claim_name(session, msg.data.get("name"), ack=_claim_ack)

        elif msg.type == InboundEvent.SEND_MESSAGE:
            result = await chat.send_message(session, msg.data.get("body"))
            await _ack(conn, msg, result.to_ack())

        else:
            await conn.send(OutboundEvent.ERROR, {"code": "unknown_type", "type": msg.type})


async def _ack(conn: WebSocketConnection, msg: WsInbound, payload: dict[str, Any]) -> None:
    await conn.send(OutboundEvent.ACK, {"id": msg.id, **payload})
