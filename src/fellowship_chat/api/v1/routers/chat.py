from __future__ import annotations

from fastapi import APIRouter, Query

from fellowship_chat.api.deps import CurrentPrincipal, DeliveryDep, MediaDep, RegistryDep, UoWDep
from fellowship_chat.api.v1.schemas.common import ApiResponse, Pagination
from fellowship_chat.api.v1.schemas.conversation import (
    ChatStatsOut,
    ConversationListData,
    ConversationOut,
)
from fellowship_chat.api.v1.schemas.message import (
    MessageListData,
    ReadResultData,
    SendMessageRequest,
    SentMessageData,
)
from fellowship_chat.application.dto.message import SendMessageDTO
from fellowship_chat.application.dto.wire import ChatMessageOut
from fellowship_chat.services import conversation_service, message_service, read_state_service
from fellowship_chat.services.chat_session import broadcast_new_message, read_receipt

router = APIRouter(prefix="/api/v2/chat", tags=["chat"])


@router.get("/conversations", response_model=ApiResponse[ConversationListData])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
    media: MediaDep,
) -> ApiResponse[ConversationListData]:
    summaries = await conversation_service.list_conversations(principal, uow, media)
    return ApiResponse(
        message="Conversations retrieved successfully",
        data=ConversationListData(
            conversations=[ConversationOut.from_summary(s) for s in summaries],
        ),
    )


@router.get("/messages/{user_id}", response_model=ApiResponse[MessageListData])
async def list_messages(
    user_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
    media: MediaDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse[MessageListData]:
    result = await message_service.list_history(principal, user_id, page, limit, uow, media)
    return ApiResponse(
        message="Messages retrieved successfully",
        data=MessageListData(
            messages=[ChatMessageOut.from_view(m) for m in result.messages],
            pagination=Pagination(
                page=result.page,
                limit=result.limit,
                total=result.total,
                pages=result.pages,
            ),
        ),
    )


@router.post("/messages", response_model=ApiResponse[SentMessageData], status_code=201)
async def send_message(
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    media: MediaDep,
    delivery: DeliveryDep,
) -> ApiResponse[SentMessageData]:
    view = await message_service.send_message(
        principal,
        SendMessageDTO(
            counterpart_id=body.user_id,
            message=body.message,
            attachment=body.attachment,
            attachment_type=body.attachment_type,
        ),
        uow,
        media,
    )
    for emit in broadcast_new_message(principal, view):
        await delivery.deliver(emit)
    return ApiResponse(
        message="Message sent successfully",
        data=SentMessageData(message=ChatMessageOut.from_view(view)),
    )


@router.get("/stats", response_model=ApiResponse[ChatStatsOut])
async def chat_stats(
    principal: CurrentPrincipal,
    uow: UoWDep,
    registry: RegistryDep,
) -> ApiResponse[ChatStatsOut]:
    stats = await conversation_service.get_stats(principal, uow, online_users=len(registry))
    return ApiResponse(
        message="Chat statistics retrieved successfully",
        data=ChatStatsOut.from_dto(stats),
    )


@router.put("/messages/read/{user_id}", response_model=ApiResponse[ReadResultData])
async def mark_messages_read(
    user_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
    delivery: DeliveryDep,
) -> ApiResponse[ReadResultData]:
    pair, updated = await read_state_service.mark_read(principal, user_id, uow)
    await delivery.deliver(read_receipt(principal, pair))
    return ApiResponse(
        message="Messages marked as read",
        data=ReadResultData(updated_count=updated),
    )


@router.delete("/messages/{message_id}", response_model=ApiResponse[None])
async def delete_message(
    message_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ApiResponse[None]:
    await message_service.delete_message(principal, message_id, uow)
    return ApiResponse(message="Message deleted successfully")
