"""Client-facing shape of a chat message, shared by WS events and REST responses."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from fellowship_chat.application.dto.message import MessageView, SenderView


class SenderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(alias="_id")
    name: str
    email: str | None = None
    profile: str | None = None

    @classmethod
    def from_view(cls, view: SenderView) -> SenderOut:
        return cls(id=view.id, name=view.name, email=view.email, profile=view.profile)


class ChatMessageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(alias="_id")
    user_id: UUID
    admin_id: UUID
    message: str
    sender_id: SenderOut
    sender_role: str
    attachment: str | None = None
    attachment_type: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_view(cls, view: MessageView) -> ChatMessageOut:
        return cls(
            id=view.id,
            user_id=view.user_id,
            admin_id=view.admin_id,
            message=view.message,
            sender_id=SenderOut.from_view(view.sender),
            sender_role=view.sender_role.value,
            attachment=view.attachment,
            attachment_type=view.attachment_type.value if view.attachment_type else None,
            is_read=view.is_read,
            read_at=view.read_at,
            created_at=view.created_at,
            updated_at=view.updated_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
