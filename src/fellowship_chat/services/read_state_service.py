from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.application.exceptions import ValidationError
from fellowship_chat.application.uow import UnitOfWork
from fellowship_chat.domain.entities.conversation import ConversationPair
from fellowship_chat.domain.value_objects.enums import Role
from fellowship_chat.domain.value_objects.ids import parse_identity_id


async def mark_conversation_read(
    principal: Principal,
    pair: ConversationPair,
    uow: UnitOfWork,
) -> int:
    """Mark every unread message the counterpart sent to ``principal`` as read.

    Already-read rows are filtered out, so repeating the call changes nothing.
    """
    sender_role = Role.USER if principal.is_admin else Role.ADMIN
    updated = await uow.messages_w.mark_read(
        pair.user_id, pair.admin_id, sender_role, datetime.now(timezone.utc),
    )
    await uow.commit()
    return updated


async def mark_read(
    principal: Principal,
    counterpart_raw: Any,
    uow: UnitOfWork,
) -> tuple[ConversationPair, int]:
    counterpart_id = parse_identity_id(counterpart_raw)
    if counterpart_id is None:
        raise ValidationError("Invalid user ID")

    pair = ConversationPair.for_viewer(principal.subject_id, principal.kind, counterpart_id)
    updated = await mark_conversation_read(principal, pair, uow)
    return pair, updated
