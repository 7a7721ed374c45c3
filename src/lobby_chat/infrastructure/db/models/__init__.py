"""Import all models so Base.metadata sees them before create_all."""
from lobby_chat.infrastructure.db.models.message import ChatMessageModel

__all__ = [
    "ChatMessageModel",
]
