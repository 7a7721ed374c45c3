from __future__ import annotations

from fastapi import APIRouter, Query

from lobby_chat.api.deps import ChatRouterDep, HistoryLoaderDep
from lobby_chat.api.v1.schemas.chat import ChatMessageResponse, RosterResponse

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.get("/roster", response_model=RosterResponse)
async def get_roster(chat: ChatRouterDep) -> RosterResponse:
    return RosterResponse(names=chat.registry.roster_names())


@router.get("/messages", response_model=list[ChatMessageResponse])
async def list_recent_messages(
    history: HistoryLoaderDep,
    limit: int = Query(50, ge=1, le=50),
) -> list[ChatMessageResponse]:
    messages = await history.load(limit)
    return [ChatMessageResponse.model_validate(m, from_attributes=True) for m in messages]
