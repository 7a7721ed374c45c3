from __future__ import annotations

from lobby_chat.domain.entities.message import ChatMessage
from lobby_chat.infrastructure.db.models.message import ChatMessageModel


def model_to_entity(model: ChatMessageModel) -> ChatMessage:
    return ChatMessage(
        nick=model.nick,
        msg=model.msg,
        created_at=model.created_at,
    )


def entity_to_model(entity: ChatMessage) -> ChatMessageModel:
    model = ChatMessageModel(nick=entity.nick, msg=entity.msg)
    if entity.created_at is not None:
        model.created_at = entity.created_at
    return model
