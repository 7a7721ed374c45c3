from __future__ import annotations

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from lobby_chat.infrastructure.db.session import ping

router = APIRouter(tags=["health"])

_started_at = time.monotonic()


@router.get("/healthz")
async def healthz() -> dict[str, object]:
    return {"status": "ok", "uptime": round(time.monotonic() - _started_at, 3)}


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    engine = request.app.state.engine
    if engine is None:
        return JSONResponse(content={"status": "ready", "database": "disabled"})

    try:
        await ping(engine)
    except Exception as exc:  # noqa: BLE001
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": [f"database: {exc}"]},
        )
    return JSONResponse(content={"status": "ready", "database": "ok"})
