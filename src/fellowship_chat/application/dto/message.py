from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from fellowship_chat.domain.entities.chat_message import ChatMessage
from fellowship_chat.domain.value_objects.enums import AttachmentKind, Role


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    counterpart_id: Any
    message: Any
    attachment: str | None = None
    attachment_type: Any = None


@dataclass(frozen=True, slots=True)
class SenderView:
    id: UUID
    name: str
    email: str | None
    profile: str | None


@dataclass(frozen=True, slots=True)
class MessageView:
    """Outbound message with the sender's display attributes resolved."""

    id: UUID
    user_id: UUID
    admin_id: UUID
    message: str
    sender: SenderView
    sender_role: Role
    attachment: str | None
    attachment_type: AttachmentKind | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def build(cls, msg: ChatMessage, sender: SenderView) -> MessageView:
        return cls(
            id=msg.id,
            user_id=msg.user_id,
            admin_id=msg.admin_id,
            message=msg.message,
            sender=sender,
            sender_role=msg.sender_role,
            attachment=msg.attachment,
            attachment_type=msg.attachment_type,
            is_read=msg.is_read,
            read_at=msg.read_at,
            created_at=msg.created_at,
            updated_at=msg.updated_at,
        )


@dataclass(frozen=True, slots=True)
class MessagePage:
    messages: list[MessageView]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
