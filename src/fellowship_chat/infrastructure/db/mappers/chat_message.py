from __future__ import annotations

from fellowship_chat.domain.entities.chat_message import ChatMessage
from fellowship_chat.domain.value_objects.enums import AttachmentKind, Role
from fellowship_chat.infrastructure.db.models.chat_message import ChatMessageModel


def model_to_entity(model: ChatMessageModel) -> ChatMessage:
    return ChatMessage(
        id=model.id,
        user_id=model.user_id,
        admin_id=model.admin_id,
        message=model.message,
        sender_id=model.sender_id,
        sender_role=Role(model.sender_role),
        is_read=model.is_read,
        read_at=model.read_at,
        attachment=model.attachment,
        attachment_type=AttachmentKind(model.attachment_type) if model.attachment_type else None,
        deleted_at=model.deleted_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: ChatMessage) -> ChatMessageModel:
    return ChatMessageModel(
        id=entity.id,
        user_id=entity.user_id,
        admin_id=entity.admin_id,
        message=entity.message,
        sender_id=entity.sender_id,
        sender_role=entity.sender_role.value,
        is_read=entity.is_read,
        read_at=entity.read_at,
        attachment=entity.attachment,
        attachment_type=entity.attachment_type.value if entity.attachment_type else None,
        deleted_at=entity.deleted_at,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
