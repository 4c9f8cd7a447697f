from __future__ import annotations

import dataclasses
import uuid
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fellowship_chat.application.dto.message import MessagePage, MessageView, SendMessageDTO, SenderView
from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.application.exceptions import ForbiddenError, NotFoundError, ValidationError
from fellowship_chat.application.policies.permissions import assert_valid_pairing, checked_counterpart
from fellowship_chat.application.ports.media import MediaUrlResolver
from fellowship_chat.application.uow import UnitOfWork
from fellowship_chat.config import settings
from fellowship_chat.domain.entities.chat_message import ChatMessage
from fellowship_chat.domain.entities.conversation import ConversationPair
from fellowship_chat.domain.value_objects.enums import AttachmentKind
from fellowship_chat.domain.value_objects.ids import parse_identity_id
from fellowship_chat.services.media import sender_view


def parse_counterpart(raw: Any) -> UUID:
    if raw is None or raw == "":
        raise ValidationError("User ID is required")
    counterpart_id = parse_identity_id(raw)
    if counterpart_id is None:
        raise ValidationError("Invalid user ID")
    return counterpart_id


def clean_text(raw: Any) -> str:
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        raise ValidationError("Message cannot be empty")
    limit = settings.MESSAGE_MAX_LENGTH
    if len(text) > limit:
        raise ValidationError(f"Message is too long (max {limit} characters)")
    return text


def parse_attachment_kind(raw: Any) -> AttachmentKind | None:
    if raw in (None, "", "none"):
        return None
    try:
        return AttachmentKind(raw)
    except ValueError as exc:
        raise ValidationError("Invalid attachment type") from exc


async def send_message(
    principal: Principal,
    dto: SendMessageDTO,
    uow: UnitOfWork,
    media: MediaUrlResolver | None = None,
) -> MessageView:
    """Validate, persist and return the populated message.

    Nothing is written unless every check passes.
    """
    counterpart_id = parse_counterpart(dto.counterpart_id)
    text = clean_text(dto.message)
    attachment_type = parse_attachment_kind(dto.attachment_type)

    counterpart = await uow.identities.get_by_id(counterpart_id)
    pair = assert_valid_pairing(principal, counterpart)

    now = datetime.now(timezone.utc)
    msg = ChatMessage(
        id=uuid.uuid4(),
        user_id=pair.user_id,
        admin_id=pair.admin_id,
        message=text,
        sender_id=principal.subject_id,
        sender_role=principal.kind,
        is_read=False,
        read_at=None,
        attachment=dto.attachment or None,
        attachment_type=attachment_type,
        deleted_at=None,
        created_at=now,
        updated_at=now,
    )
    msg = await uow.messages_w.create(msg)
    await uow.commit()

    sender = await sender_view(
        principal.subject_id, principal.name, principal.email, principal.profile, media,
    )
    return MessageView.build(msg, sender)


async def list_history(
    principal: Principal,
    counterpart_raw: Any,
    page: int,
    limit: int,
    uow: UnitOfWork,
    media: MediaUrlResolver | None = None,
) -> MessagePage:
    """One page of a conversation, oldest first within the page.

    Returned messages addressed to the viewer are marked read.
    """
    counterpart_id = parse_counterpart(counterpart_raw)
    counterpart = checked_counterpart(principal, await uow.identities.get_by_id(counterpart_id))
    pair = ConversationPair.for_viewer(principal.subject_id, principal.kind, counterpart.id)

    rows = await uow.messages.list_page(
        pair.user_id, pair.admin_id, offset=(page - 1) * limit, limit=limit,
    )
    rows.reverse()
    total = await uow.messages.count(pair.user_id, pair.admin_id)

    unread_ids = [
        m.id for m in rows if not m.is_read and m.is_addressed_to(principal.subject_id)
    ]
    if unread_ids:
        now = datetime.now(timezone.utc)
        await uow.messages_w.mark_read_ids(unread_ids, now)
        await uow.commit()
        marked = set(unread_ids)
        rows = [
            dataclasses.replace(m, is_read=True, read_at=now) if m.id in marked else m
            for m in rows
        ]

    senders: dict[UUID, SenderView] = {
        principal.subject_id: await sender_view(
            principal.subject_id, principal.name, principal.email, principal.profile, media,
        ),
        counterpart.id: await sender_view(
            counterpart.id, counterpart.name, counterpart.email, counterpart.profile, media,
        ),
    }
    return MessagePage(
        messages=[MessageView.build(m, senders[m.sender_id]) for m in rows],
        page=page,
        limit=limit,
        total=total,
    )


async def delete_message(
    principal: Principal,
    message_id_raw: Any,
    uow: UnitOfWork,
) -> ChatMessage:
    """Soft-delete a message; only its sender may do so."""
    message_id = parse_identity_id(message_id_raw)
    if message_id is None:
        raise ValidationError("Invalid message ID")

    msg = await uow.messages.get_by_id(message_id)
    if msg is None:
        raise NotFoundError("Message not found")
    if msg.sender_id != principal.subject_id:
        raise ForbiddenError("You can only delete your own messages")
    if msg.is_deleted:
        raise NotFoundError("Message not found")

    now = datetime.now(timezone.utc)
    await uow.messages_w.soft_delete(message_id, now)
    await uow.commit()
    return dataclasses.replace(msg, deleted_at=now, updated_at=now)
