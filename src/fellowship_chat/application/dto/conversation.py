from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from fellowship_chat.domain.value_objects.enums import Role


@dataclass(frozen=True, slots=True)
class LastMessageDTO:
    id: UUID
    message: str
    sender_id: UUID
    sender_role: Role
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    counterpart_id: UUID
    counterpart_name: str
    counterpart_email: str | None
    counterpart_profile: str | None
    counterpart_role: Role
    last_message: LastMessageDTO
    unread_count: int


@dataclass(frozen=True, slots=True)
class ChatStatsDTO:
    total_chats: int
    online_users: int
    unread_messages: int
    responded_chats: int
