"""Per-connection chat protocol.

A ``ChatSession`` is created once a connection has been authenticated. Every
inbound event is routed through a dispatch table to a handler that returns a
``SessionResult``: the groups to join and the events to emit. The transport
adapter applies the result; nothing in here touches a socket.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Awaitable, Callable

from fellowship_chat.application.dto.events import (
    CHAT_ERROR,
    CHAT_JOIN,
    CHAT_JOINED,
    CHAT_MARK_READ,
    CHAT_MESSAGE_SENT,
    CHAT_MESSAGES_READ,
    CHAT_NEW_MESSAGE,
    CHAT_NOTIFICATION,
    CHAT_ONLINE,
    CHAT_READ_CONFIRMED,
    CHAT_SEND_MESSAGE,
    CHAT_TYPING,
    CHAT_USER_STATUS,
    CHAT_USER_TYPING,
    Emit,
    Target,
)
from fellowship_chat.application.dto.message import MessageView, SendMessageDTO
from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.application.dto.wire import ChatMessageOut
from fellowship_chat.application.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from fellowship_chat.application.ports.media import MediaUrlResolver
from fellowship_chat.application.ports.presence import ConnectionRegistry
from fellowship_chat.application.uow import UoWFactory
from fellowship_chat.config import settings
from fellowship_chat.domain.entities.conversation import ConversationPair
from fellowship_chat.domain.value_objects.enums import PresenceStatus
from fellowship_chat.domain.value_objects.ids import parse_identity_id
from fellowship_chat.domain.value_objects.rooms import ADMIN_CHANNEL, personal_channel
from fellowship_chat.services import conversation_service, message_service, read_state_service

logger = logging.getLogger(__name__)


class Outcome(StrEnum):
    OK = "ok"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    DROPPED = "dropped"
    FAILED = "failed"


@dataclass(slots=True)
class SessionResult:
    outcome: Outcome = Outcome.OK
    joins: list[str] = field(default_factory=list)
    emits: list[Emit] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.OK

    @classmethod
    def failure(cls, outcome: Outcome, error: str) -> SessionResult:
        return cls(outcome=outcome, emits=[Emit(CHAT_ERROR, {"error": error}, Target.origin())])

    @classmethod
    def dropped(cls) -> SessionResult:
        return cls(outcome=Outcome.DROPPED)


Handler = Callable[[dict[str, Any]], Awaitable[SessionResult]]

# Generic messages for failures that are not the caller's fault (e.g. store unavailable).
_FAILURE_MESSAGES = {
    CHAT_JOIN: "Error joining chat",
    CHAT_SEND_MESSAGE: "Error sending message",
    CHAT_MARK_READ: "Error marking messages as read",
}


def notification_preview(text: str) -> str:
    return text[: settings.NOTIFICATION_PREVIEW_LENGTH]


class ChatSession:
    def __init__(
        self,
        principal: Principal,
        connection_id: str,
        registry: ConnectionRegistry,
        uow_factory: UoWFactory,
        media: MediaUrlResolver | None = None,
    ) -> None:
        self.principal = principal
        self.connection_id = connection_id
        self._registry = registry
        self._uow_factory = uow_factory
        self._media = media
        self._handlers: dict[str, Handler] = {
            CHAT_JOIN: self._on_join,
            CHAT_SEND_MESSAGE: self._on_send_message,
            CHAT_TYPING: self._on_typing,
            CHAT_MARK_READ: self._on_mark_read,
            CHAT_ONLINE: self._on_online,
        }

    def connect(self) -> SessionResult:
        """Register the connection and join its personal (and admin) channels."""
        self._registry.register(self.principal.principal_key, self.connection_id)
        joins = [personal_channel(self.principal.subject_id)]
        if self.principal.is_admin:
            joins.append(ADMIN_CHANNEL)
        logger.info(
            "Chat connection %s bound to %s (%s)",
            self.connection_id, self.principal.subject_id, self.principal.kind,
        )
        return SessionResult(joins=joins)

    def disconnect(self) -> SessionResult:
        self._registry.unregister(self.connection_id)
        logger.info("Chat connection %s closed", self.connection_id)
        if self._registry.lookup_by_identity(self.principal.principal_key) is not None:
            # A newer connection for this identity is still live.
            return SessionResult()
        return SessionResult(emits=[self._presence(PresenceStatus.OFFLINE)])

    async def handle(self, event: str, data: Any) -> SessionResult:
        handler = self._handlers.get(event)
        if handler is None:
            return SessionResult.failure(Outcome.VALIDATION, f"Unknown event: {event}")
        payload = data if isinstance(data, dict) else {}
        try:
            return await handler(payload)
        except ValidationError as exc:
            return SessionResult.failure(Outcome.VALIDATION, exc.detail)
        except NotFoundError as exc:
            return SessionResult.failure(Outcome.NOT_FOUND, exc.detail)
        except ForbiddenError as exc:
            return SessionResult.failure(Outcome.FORBIDDEN, exc.detail)
        except Exception:
            logger.exception("Chat event %s failed for %s", event, self.principal.subject_id)
            return SessionResult.failure(
                Outcome.FAILED, _FAILURE_MESSAGES.get(event, "Operation failed"),
            )

    async def _on_join(self, data: dict[str, Any]) -> SessionResult:
        async with self._uow_factory() as uow:
            pair = await conversation_service.join_conversation(
                self.principal, data.get("userId"), uow,
            )
        counterpart_id = pair.counterpart_of(self.principal.subject_id)
        return SessionResult(
            joins=[pair.room_id],
            emits=[
                Emit(
                    CHAT_JOINED,
                    {"roomId": pair.room_id, "userId": str(counterpart_id)},
                    Target.origin(),
                ),
            ],
        )

    async def _on_send_message(self, data: dict[str, Any]) -> SessionResult:
        dto = SendMessageDTO(
            counterpart_id=data.get("userId"),
            message=data.get("message"),
            attachment=data.get("attachment"),
            attachment_type=data.get("attachment_type"),
        )
        async with self._uow_factory() as uow:
            view = await message_service.send_message(self.principal, dto, uow, self._media)

        emits = broadcast_new_message(self.principal, view)
        emits.append(
            Emit(CHAT_MESSAGE_SENT, {"_id": str(view.id), "message": view.message}, Target.origin())
        )
        return SessionResult(emits=emits)

    async def _on_typing(self, data: dict[str, Any]) -> SessionResult:
        counterpart_id = parse_identity_id(data.get("userId"))
        if counterpart_id is None:
            return SessionResult.dropped()

        pair = ConversationPair.for_viewer(
            self.principal.subject_id, self.principal.kind, counterpart_id,
        )
        return SessionResult(
            emits=[
                Emit(
                    CHAT_USER_TYPING,
                    {
                        "userId": str(self.principal.subject_id),
                        "userName": self.principal.name,
                        "isTyping": data.get("isTyping") is True,
                    },
                    Target.to_group(pair.room_id, skip_self=True),
                ),
            ],
        )

    async def _on_mark_read(self, data: dict[str, Any]) -> SessionResult:
        async with self._uow_factory() as uow:
            pair, _updated = await read_state_service.mark_read(
                self.principal, data.get("userId"), uow,
            )
        return SessionResult(
            emits=[
                read_receipt(self.principal, pair),
                Emit(CHAT_READ_CONFIRMED, {}, Target.origin()),
            ],
        )

    async def _on_online(self, data: dict[str, Any]) -> SessionResult:
        return SessionResult(emits=[self._presence(PresenceStatus.ONLINE)])

    def _presence(self, status: PresenceStatus) -> Emit:
        # Admin presence goes to everyone; user presence only to admins.
        target = Target.everyone() if self.principal.is_admin else Target.to_group(ADMIN_CHANNEL)
        return Emit(
            CHAT_USER_STATUS,
            {"userId": str(self.principal.subject_id), "status": status.value},
            target,
        )


def broadcast_new_message(sender: Principal, view: MessageView) -> list[Emit]:
    """Room broadcast plus an out-of-room notification for the other side."""
    room = ConversationPair(user_id=view.user_id, admin_id=view.admin_id).room_id
    emits = [
        Emit(CHAT_NEW_MESSAGE, ChatMessageOut.from_view(view).to_payload(), Target.to_group(room)),
    ]

    notification: dict[str, Any] = {
        "type": "new_message",
        "from": {"_id": str(sender.subject_id), "name": sender.name},
    }
    if sender.is_admin:
        channel = personal_channel(view.user_id)
    else:
        notification["userId"] = str(view.user_id)
        channel = ADMIN_CHANNEL
    notification["message"] = notification_preview(view.message)
    emits.append(Emit(CHAT_NOTIFICATION, notification, Target.to_group(channel, skip_group=room)))
    return emits


def read_receipt(reader: Principal, pair: ConversationPair) -> Emit:
    return Emit(
        CHAT_MESSAGES_READ,
        {"userId": str(reader.subject_id)},
        Target.to_group(pair.room_id),
    )
