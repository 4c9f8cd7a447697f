from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import pytest

from fellowship_chat.application.dto.events import (
    CHAT_ERROR,
    CHAT_JOINED,
    CHAT_MESSAGE_SENT,
    CHAT_MESSAGES_READ,
    CHAT_NEW_MESSAGE,
    CHAT_NOTIFICATION,
    CHAT_READ_CONFIRMED,
    CHAT_USER_STATUS,
    CHAT_USER_TYPING,
    TargetKind,
)
from fellowship_chat.domain.value_objects.enums import Role
from fellowship_chat.domain.value_objects.rooms import ADMIN_CHANNEL, personal_channel, room_id
from fellowship_chat.infrastructure.ws.registry import InMemoryConnectionRegistry
from fellowship_chat.services.chat_session import ChatSession, Outcome
from tests.conftest import make_identity, make_message


@pytest.fixture
def registry():
    return InMemoryConnectionRegistry()


@pytest.fixture
def user_session(uow, user_principal, registry):
    return ChatSession(user_principal, "conn-user", registry, uow.factory())


@pytest.fixture
def admin_session(uow, admin_principal, registry):
    return ChatSession(admin_principal, "conn-admin", registry, uow.factory())


def _by_event(result):
    return {e.event: e for e in result.emits}


def test_user_connect_joins_personal_channel(user_session, user, registry):
    result = user_session.connect()

    assert result.joins == [personal_channel(user.id)]
    assert registry.lookup_by_identity(str(user.id)) == "conn-user"


def test_admin_connect_joins_admin_channel(admin_session, admin):
    result = admin_session.connect()

    assert result.joins == [personal_channel(admin.id), ADMIN_CHANNEL]


@pytest.mark.asyncio
async def test_join_emits_joined_and_marks_read(user_session, uow, user, admin):
    uow.messages._messages.append(make_message(user, admin, sender=admin))

    result = await user_session.handle("chat:join", {"userId": str(admin.id)})

    room = room_id(user.id, admin.id)
    assert result.ok
    assert result.joins == [room]
    joined = _by_event(result)[CHAT_JOINED]
    assert joined.data == {"roomId": room, "userId": str(admin.id)}
    assert joined.target.kind == TargetKind.SELF
    assert uow.messages._messages[0].is_read is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("data", "outcome", "error"),
    [
        ({}, Outcome.VALIDATION, "User ID is required"),
        ({"userId": "garbage"}, Outcome.VALIDATION, "Invalid user ID"),
        ({"userId": str(uuid.uuid4())}, Outcome.NOT_FOUND, "You can only chat with admins"),
    ],
)
async def test_join_failures(user_session, data, outcome, error):
    result = await user_session.handle("chat:join", data)

    assert result.outcome == outcome
    assert result.joins == []
    assert len(result.emits) == 1
    assert result.emits[0].event == CHAT_ERROR
    assert result.emits[0].data == {"error": error}
    assert result.emits[0].target.kind == TargetKind.SELF


@pytest.mark.asyncio
async def test_user_cannot_join_user(user_session, uow):
    other = make_identity(role=Role.USER, name="Sam")
    uow.identities.add(other)

    result = await user_session.handle("chat:join", {"userId": str(other.id)})

    assert result.outcome == Outcome.FORBIDDEN
    assert result.joins == []


@pytest.mark.asyncio
async def test_user_send_message(user_session, uow, user, admin):
    result = await user_session.handle(
        "chat:send_message", {"userId": str(admin.id), "message": "hello"},
    )

    room = room_id(user.id, admin.id)
    emits = _by_event(result)
    assert result.ok

    new_message = emits[CHAT_NEW_MESSAGE]
    assert new_message.target.group == room
    assert new_message.data["message"] == "hello"
    assert new_message.data["sender_id"]["_id"] == str(user.id)
    assert new_message.data["sender_role"] == "user"

    notification = emits[CHAT_NOTIFICATION]
    assert notification.target.group == ADMIN_CHANNEL
    assert notification.target.skip_group == room
    assert notification.data == {
        "type": "new_message",
        "from": {"_id": str(user.id), "name": user.name},
        "userId": str(user.id),
        "message": "hello",
    }

    sent = emits[CHAT_MESSAGE_SENT]
    assert sent.target.kind == TargetKind.SELF
    assert sent.data == {"_id": new_message.data["_id"], "message": "hello"}
    assert len(uow.messages._messages) == 1


@pytest.mark.asyncio
async def test_admin_send_notifies_user_channel(admin_session, user, admin):
    long_text = "y" * 250
    result = await admin_session.handle(
        "chat:send_message", {"userId": str(user.id), "message": long_text},
    )

    notification = _by_event(result)[CHAT_NOTIFICATION]
    assert notification.target.group == personal_channel(user.id)
    assert "userId" not in notification.data
    assert notification.data["message"] == "y" * 100
    assert _by_event(result)[CHAT_NEW_MESSAGE].data["message"] == long_text


@pytest.mark.asyncio
async def test_send_empty_message_is_rejected(user_session, uow, admin):
    result = await user_session.handle(
        "chat:send_message", {"userId": str(admin.id), "message": "   "},
    )

    assert result.outcome == Outcome.VALIDATION
    assert result.emits[0].data == {"error": "Message cannot be empty"}
    assert uow.messages._messages == []


@pytest.mark.asyncio
async def test_store_failure_becomes_generic_error(user_principal, registry, admin):
    @asynccontextmanager
    async def broken():
        raise RuntimeError("database is down")
        yield  # pragma: no cover

    session = ChatSession(user_principal, "conn", registry, broken)

    result = await session.handle("chat:send_message", {"userId": str(admin.id), "message": "hi"})

    assert result.outcome == Outcome.FAILED
    assert result.emits[0].data == {"error": "Error sending message"}


@pytest.mark.asyncio
async def test_typing_goes_to_room_except_sender(user_session, user, admin):
    result = await user_session.handle("chat:typing", {"userId": str(admin.id), "isTyping": True})

    typing = _by_event(result)[CHAT_USER_TYPING]
    assert typing.target.group == room_id(user.id, admin.id)
    assert typing.target.skip_self is True
    assert typing.data == {"userId": str(user.id), "userName": user.name, "isTyping": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", ["false", "true", 1, None])
async def test_typing_flag_must_be_a_real_boolean(user_session, admin, flag):
    result = await user_session.handle("chat:typing", {"userId": str(admin.id), "isTyping": flag})

    assert _by_event(result)[CHAT_USER_TYPING].data["isTyping"] is False


@pytest.mark.asyncio
async def test_typing_with_bad_id_is_dropped(user_session):
    result = await user_session.handle("chat:typing", {"userId": "??"})

    assert result.outcome == Outcome.DROPPED
    assert result.emits == []


@pytest.mark.asyncio
async def test_mark_read(admin_session, uow, user, admin):
    uow.messages._messages.append(make_message(user, admin, sender=user))

    result = await admin_session.handle("chat:mark_read", {"userId": str(user.id)})

    emits = _by_event(result)
    assert emits[CHAT_MESSAGES_READ].target.group == room_id(user.id, admin.id)
    assert emits[CHAT_MESSAGES_READ].data == {"userId": str(admin.id)}
    assert emits[CHAT_READ_CONFIRMED].target.kind == TargetKind.SELF
    assert uow.messages._messages[0].is_read is True


@pytest.mark.asyncio
async def test_user_presence_goes_to_admins(user_session, user):
    result = await user_session.handle("chat:online", {})

    status = _by_event(result)[CHAT_USER_STATUS]
    assert status.target.group == ADMIN_CHANNEL
    assert status.data == {"userId": str(user.id), "status": "online"}


@pytest.mark.asyncio
async def test_admin_presence_goes_to_everyone(admin_session):
    result = await admin_session.handle("chat:online", None)

    assert _by_event(result)[CHAT_USER_STATUS].target.kind == TargetKind.EVERYONE


def test_disconnect_announces_offline(user_session, user, registry):
    user_session.connect()

    result = user_session.disconnect()

    status = _by_event(result)[CHAT_USER_STATUS]
    assert status.data == {"userId": str(user.id), "status": "offline"}
    assert registry.lookup_by_identity(str(user.id)) is None


def test_disconnect_of_superseded_connection_is_silent(uow, user_principal, user, registry):
    old = ChatSession(user_principal, "old", registry, uow.factory())
    new = ChatSession(user_principal, "new", registry, uow.factory())
    old.connect()
    new.connect()

    result = old.disconnect()

    assert result.emits == []
    assert registry.lookup_by_identity(str(user.id)) == "new"


@pytest.mark.asyncio
async def test_unknown_event(user_session):
    result = await user_session.handle("chat:dance", {})

    assert result.outcome == Outcome.VALIDATION
    assert result.emits[0].data == {"error": "Unknown event: chat:dance"}


@pytest.mark.asyncio
async def test_role_is_fixed_for_the_connection(user_session, uow, user):
    promoted = make_identity(role=Role.ADMIN, name=user.name, identity_id=user.id)
    uow.identities.add(promoted)

    result = await user_session.handle("chat:online", {})

    # Still announced as a user until the client reconnects.
    assert _by_event(result)[CHAT_USER_STATUS].target.group == ADMIN_CHANNEL
