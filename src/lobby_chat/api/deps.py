"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from lobby_chat.services.chat_router import ChatRouter
from lobby_chat.services.history import HistoryLoader


def get_chat_router(conn: HTTPConnection) -> ChatRouter:
    return conn.app.state.chat_router


ChatRouterDep = Annotated[ChatRouter, Depends(get_chat_router)]


def get_history_loader(conn: HTTPConnection) -> HistoryLoader:
    return conn.app.state.history_loader


HistoryLoaderDep = Annotated[HistoryLoader, Depends(get_history_loader)]
