from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from fellowship_chat.api.v1.schemas.common import Pagination
from fellowship_chat.application.dto.wire import ChatMessageOut


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, alias="userId")
    message: str | None = None
    attachment: str | None = None
    attachment_type: str | None = None


class MessageListData(BaseModel):
    messages: list[ChatMessageOut]
    pagination: Pagination


class SentMessageData(BaseModel):
    message: ChatMessageOut


class ReadResultData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    updated_count: int = Field(alias="updatedCount")
