"""Realtime event names and delivery directives."""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

# client -> server
CHAT_JOIN = "chat:join"
CHAT_SEND_MESSAGE = "chat:send_message"
CHAT_TYPING = "chat:typing"
CHAT_MARK_READ = "chat:mark_read"
CHAT_ONLINE = "chat:online"

# server -> client
CHAT_JOINED = "chat:joined"
CHAT_NEW_MESSAGE = "chat:new_message"
CHAT_MESSAGE_SENT = "chat:message_sent"
CHAT_USER_TYPING = "chat:user_typing"
CHAT_MESSAGES_READ = "chat:messages_read"
CHAT_READ_CONFIRMED = "chat:read_confirmed"
CHAT_USER_STATUS = "chat:user_status"
CHAT_NOTIFICATION = "chat:notification"
CHAT_ERROR = "chat:error"
CONNECT_ERROR = "connect_error"


class TargetKind(StrEnum):
    SELF = "self"
    GROUP = "group"
    EVERYONE = "everyone"


@dataclass(frozen=True, slots=True)
class Target:
    kind: TargetKind
    group: str | None = None
    skip_self: bool = False
    skip_group: str | None = None

    @classmethod
    def origin(cls) -> Target:
        return cls(kind=TargetKind.SELF)

    @classmethod
    def to_group(
        cls, group: str, *, skip_self: bool = False, skip_group: str | None = None,
    ) -> Target:
        return cls(kind=TargetKind.GROUP, group=group, skip_self=skip_self, skip_group=skip_group)

    @classmethod
    def everyone(cls) -> Target:
        return cls(kind=TargetKind.EVERYONE)


@dataclass(frozen=True, slots=True)
class Emit:
    event: str
    data: dict[str, Any]
    target: Target
