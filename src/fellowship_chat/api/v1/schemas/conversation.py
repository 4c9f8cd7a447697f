from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from fellowship_chat.application.dto.conversation import ChatStatsDTO, ConversationSummary


class CounterpartOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(alias="_id")
    name: str
    email: str | None = None
    profile: str | None = None
    role: str


class LastMessageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(alias="_id")
    message: str
    sender_id: UUID
    sender_role: str
    created_at: datetime = Field(alias="createdAt")


class ConversationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    counterpart: CounterpartOut
    last_message: LastMessageOut = Field(alias="lastMessage")
    unread_count: int = Field(alias="unreadCount")

    @classmethod
    def from_summary(cls, summary: ConversationSummary) -> ConversationOut:
        last = summary.last_message
        return cls(
            counterpart=CounterpartOut(
                id=summary.counterpart_id,
                name=summary.counterpart_name,
                email=summary.counterpart_email,
                profile=summary.counterpart_profile,
                role=summary.counterpart_role.value,
            ),
            last_message=LastMessageOut(
                id=last.id,
                message=last.message,
                sender_id=last.sender_id,
                sender_role=last.sender_role.value,
                created_at=last.created_at,
            ),
            unread_count=summary.unread_count,
        )


class ConversationListData(BaseModel):
    conversations: list[ConversationOut]


class ChatStatsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_chats: int = Field(alias="totalChats")
    online_users: int = Field(alias="onlineUsers")
    unread_messages: int = Field(alias="unreadMessages")
    responded_chats: int = Field(alias="respondedChats")

    @classmethod
    def from_dto(cls, dto: ChatStatsDTO) -> ChatStatsOut:
        return cls(
            total_chats=dto.total_chats,
            online_users=dto.online_users,
            unread_messages=dto.unread_messages,
            responded_chats=dto.responded_chats,
        )
