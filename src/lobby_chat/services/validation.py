"""Pure input checks: nicknames, message bodies, whisper commands."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

NICKNAME_MIN_LENGTH = 3
NICKNAME_MAX_LENGTH = 20
MESSAGE_MAX_LENGTH = 2000
WHISPER_PREFIX = "/w "

_NICKNAME_RE = re.compile(r"[A-Za-z0-9._-]+")
_WHITESPACE_RUN_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class WhisperCommand:
    target: str
    content: str


def validate_nickname(raw: Any) -> bool:
    if not isinstance(raw, str):
        return False
    name = raw.strip()
    if not NICKNAME_MIN_LENGTH <= len(name) <= NICKNAME_MAX_LENGTH:
        return False
    return _NICKNAME_RE.fullmatch(name) is not None


def normalize_nickname(raw: str) -> str:
    return raw.strip().lower()


def _coerce_text(raw: Any) -> str:
    if raw is None or isinstance(raw, bool):
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    if isinstance(raw, (int, float)):
        return str(raw)
    return ""


def sanitize_message(raw: Any) -> str:
    """Coerce, normalize line endings, trim and truncate. Never raises."""
    text = _coerce_text(raw).replace("\r\n", "\n")
    return text.strip()[:MESSAGE_MAX_LENGTH]


def is_whisper(body: str) -> bool:
    return body.startswith(WHISPER_PREFIX)


def parse_whisper(body: str) -> WhisperCommand | None:
    """Split ``/w <target> <content>``.

    Returns None when the target is not followed by a separator. Any run of
    whitespace separates target from content.
    """
    rest = body[len(WHISPER_PREFIX):].lstrip()
    parts = _WHITESPACE_RUN_RE.split(rest, maxsplit=1)
    if len(parts) < 2:
        return None
    target, content = parts
    return WhisperCommand(target=target, content=sanitize_message(content))
