from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from fellowship_chat.domain.value_objects.enums import AttachmentKind, Role
from fellowship_chat.domain.value_objects.rooms import room_id


@dataclass(frozen=True, slots=True)
class ChatMessage:
    id: UUID
    user_id: UUID
    admin_id: UUID
    message: str
    sender_id: UUID
    sender_role: Role
    is_read: bool
    read_at: datetime | None
    attachment: str | None
    attachment_type: AttachmentKind | None
    deleted_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def room_id(self) -> str:
        return room_id(self.user_id, self.admin_id)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def is_addressed_to(self, identity_id: UUID) -> bool:
        return self.sender_id != identity_id and identity_id in (self.user_id, self.admin_id)
