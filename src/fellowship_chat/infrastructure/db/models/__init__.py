"""Import all models so Base.metadata sees every table (the FKs to users need it)."""
from fellowship_chat.infrastructure.db.models.chat_message import ChatMessageModel
from fellowship_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "ChatMessageModel",
    "UserModel",
]
