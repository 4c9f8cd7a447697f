from __future__ import annotations

import dataclasses
from typing import Any

from fellowship_chat.application.dto.conversation import ChatStatsDTO, ConversationSummary
from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.application.policies.permissions import assert_admin, assert_valid_pairing
from fellowship_chat.application.ports.media import MediaUrlResolver
from fellowship_chat.application.uow import UnitOfWork
from fellowship_chat.domain.entities.conversation import ConversationPair
from fellowship_chat.services.media import resolve_media_url
from fellowship_chat.services.message_service import parse_counterpart
from fellowship_chat.services.read_state_service import mark_conversation_read


async def join_conversation(
    principal: Principal,
    counterpart_raw: Any,
    uow: UnitOfWork,
) -> ConversationPair:
    """Validate the pairing and mark the incoming side of the conversation read."""
    counterpart_id = parse_counterpart(counterpart_raw)
    counterpart = await uow.identities.get_by_id(counterpart_id)
    pair = assert_valid_pairing(principal, counterpart)
    await mark_conversation_read(principal, pair, uow)
    return pair


async def list_conversations(
    principal: Principal,
    uow: UnitOfWork,
    media: MediaUrlResolver | None = None,
) -> list[ConversationSummary]:
    summaries = await uow.messages.list_conversations(principal.subject_id, principal.kind)
    return [
        dataclasses.replace(
            s, counterpart_profile=await resolve_media_url(media, s.counterpart_profile),
        )
        for s in summaries
    ]


async def get_stats(
    principal: Principal,
    uow: UnitOfWork,
    online_users: int = 0,
) -> ChatStatsDTO:
    assert_admin(principal)
    stats = await uow.messages.stats(principal.subject_id)
    return dataclasses.replace(stats, online_users=online_users)
