from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from lobby_chat.api.v1.routers import chat, health, ws
from lobby_chat.application.exceptions import HistoryUnavailableError
from lobby_chat.application.repositories.message import MessageStore
from lobby_chat.config import Settings, settings as default_settings
from lobby_chat.infrastructure.db.repositories.message import SqlAlchemyMessageStore
from lobby_chat.infrastructure.db.session import (
    build_engine,
    build_session_factory,
    init_schema_with_retry,
)
from lobby_chat.infrastructure.ws.manager import ConnectionManager
from lobby_chat.services.chat_router import ChatRouter
from lobby_chat.services.history import HistoryLoader
from lobby_chat.services.rate_limiter import RateLimiter
from lobby_chat.services.registry import IdentityRegistry

logger = logging.getLogger(__name__)


async def _init_store(app: FastAPI, engine: AsyncEngine, cfg: Settings) -> None:
    ready = await init_schema_with_retry(
        engine,
        retries=cfg.DB_CONNECT_RETRIES,
        delay=cfg.DB_CONNECT_RETRY_DELAY,
    )
    if not ready:
        logger.error("Message store unavailable; chatting without history or durability")
        app.state.chat_router.go_ephemeral()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    engine = app.state.engine
    init_task: asyncio.Task | None = None
    if engine is not None:
        cfg: Settings = app.state.settings
        # Runs in the background so the HTTP side is up before the database is.
        init_task = asyncio.create_task(_init_store(app, engine, cfg), name="db-init")
    else:
        logger.warning("DATABASE_URL is not set; running without message history")

    yield

    if init_task is not None:
        init_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await init_task
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")


def create_app(
    cfg: Settings | None = None,
    *,
    store: MessageStore | None = None,
) -> FastAPI:
    """Build the application.

    An explicit ``store`` bypasses DATABASE_URL and no engine is created.
    """
    cfg = cfg or default_settings

    engine = None
    if store is None and cfg.DATABASE_URL:
        engine = build_engine(cfg)
        store = SqlAlchemyMessageStore(build_session_factory(engine))

    app = FastAPI(
        title="Lobby Chat",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.engine = engine
    app.state.history_loader = HistoryLoader(
        store,
        limit=cfg.HISTORY_LIMIT,
        timeout=cfg.HISTORY_TIMEOUT_SECONDS,
    )
    app.state.chat_router = ChatRouter(
        IdentityRegistry(),
        ConnectionManager(),
        store,
        history=app.state.history_loader,
        rate_limiter=RateLimiter(cfg.MESSAGE_MIN_INTERVAL_MS),
        persist_timeout=cfg.PERSIST_TIMEOUT_SECONDS,
        echo_to_sender=cfg.ECHO_TO_SENDER,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HistoryUnavailableError)
    async def _history_unavailable(_req: Request, exc: HistoryUnavailableError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": exc.detail, "code": exc.code})
