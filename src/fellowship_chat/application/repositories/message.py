from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from fellowship_chat.application.dto.conversation import ChatStatsDTO, ConversationSummary
from fellowship_chat.domain.entities.chat_message import ChatMessage
from fellowship_chat.domain.value_objects.enums import Role


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> ChatMessage | None:
        """Fetch a message including soft-deleted rows."""
        ...

    async def list_page(
        self,
        user_id: UUID,
        admin_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> list[ChatMessage]:
        """Non-deleted messages of one conversation, newest first."""
        ...

    async def count(self, user_id: UUID, admin_id: UUID) -> int: ...

    async def list_conversations(
        self, viewer_id: UUID, viewer_role: Role
    ) -> list[ConversationSummary]:
        """One summary per counterpart, most recent conversation first."""
        ...

    async def stats(self, admin_id: UUID) -> ChatStatsDTO:
        """Aggregate counters; ``online_users`` is left at 0 for the caller to fill."""
        ...


class MessageWriter(Protocol):
    async def create(self, message: ChatMessage) -> ChatMessage: ...

    async def mark_read(
        self,
        user_id: UUID,
        admin_id: UUID,
        sender_role: Role,
        read_at: datetime,
    ) -> int:
        """Mark unread messages sent by ``sender_role`` as read. Returns rows changed."""
        ...

    async def mark_read_ids(self, ids: list[UUID], read_at: datetime) -> int: ...

    async def soft_delete(self, message_id: UUID, deleted_at: datetime) -> None: ...
