from __future__ import annotations

from enum import StrEnum


class SessionState(StrEnum):
    ANONYMOUS = "anonymous"
    ACTIVE = "active"
    DISCONNECTED = "disconnected"


class OutboundEvent(StrEnum):
    REPLAY = "replay"
    ROSTER = "roster"
    NEW_MESSAGE = "new_message"
    WHISPER = "whisper"
    ACK = "ack"
    ERROR = "error"
    PONG = "pong"


class InboundEvent(StrEnum):
    CLAIM_NAME = "claim_name"
    SEND_MESSAGE = "send_message"
    PING = "ping"
