"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator
from uuid import UUID

import pytest

from fellowship_chat.application.dto.conversation import (
    ChatStatsDTO,
    ConversationSummary,
    LastMessageDTO,
)
from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.domain.entities.chat_message import ChatMessage
from fellowship_chat.domain.entities.identity import Identity
from fellowship_chat.domain.value_objects.enums import Role

_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_identity(
    *,
    role: Role = Role.USER,
    name: str = "Frodo",
    identity_id: UUID | None = None,
    deleted: bool = False,
) -> Identity:
    return Identity(
        id=identity_id or uuid.uuid4(),
        name=name,
        email=f"{name.lower()}@example.com",
        profile=f"avatars/{name.lower()}.png",
        role=role,
        deleted_at=_BASE_TIME if deleted else None,
    )


def make_message(
    user: Identity,
    admin: Identity,
    *,
    sender: Identity | None = None,
    text: str = "hello",
    seconds: int = 0,
    is_read: bool = False,
) -> ChatMessage:
    sender = sender or user
    created_at = _BASE_TIME + timedelta(seconds=seconds)
    return ChatMessage(
        id=uuid.uuid4(),
        user_id=user.id,
        admin_id=admin.id,
        message=text,
        sender_id=sender.id,
        sender_role=sender.role,
        is_read=is_read,
        read_at=created_at if is_read else None,
        attachment=None,
        attachment_type=None,
        deleted_at=None,
        created_at=created_at,
        updated_at=created_at,
    )


@dataclass
class FakeIdentityReader:
    _store: dict[UUID, Identity] = field(default_factory=dict)

    def add(self, *identities: Identity) -> None:
        for identity in identities:
            self._store[identity.id] = identity

    async def get_by_id(self, identity_id: UUID) -> Identity | None:
        return self._store.get(identity_id)


@dataclass
class FakeMessageReader:
    """Insertion order stands in for the ``seq`` tie-breaker."""

    _identities: FakeIdentityReader
    _messages: list[ChatMessage] = field(default_factory=list)

    def _live(self, user_id: UUID, admin_id: UUID) -> list[ChatMessage]:
        return [
            m for m in self._messages
            if m.user_id == user_id and m.admin_id == admin_id and not m.is_deleted
        ]

    def _newest_first(self, messages: list[ChatMessage]) -> list[ChatMessage]:
        indexed = list(enumerate(messages))
        indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [m for _, m in indexed]

    async def get_by_id(self, message_id: UUID) -> ChatMessage | None:
        for m in self._messages:
            if m.id == message_id:
                return m
        return None

    async def list_page(
        self,
        user_id: UUID,
        admin_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> list[ChatMessage]:
        return self._newest_first(self._live(user_id, admin_id))[offset:offset + limit]

    async def count(self, user_id: UUID, admin_id: UUID) -> int:
        return len(self._live(user_id, admin_id))

    async def list_conversations(
        self, viewer_id: UUID, viewer_role: Role
    ) -> list[ConversationSummary]:
        is_admin = viewer_role == Role.ADMIN
        incoming = Role.USER if is_admin else Role.ADMIN
        by_counterpart: dict[UUID, list[ChatMessage]] = {}
        for m in self._newest_first([m for m in self._messages if not m.is_deleted]):
            if (m.admin_id if is_admin else m.user_id) != viewer_id:
                continue
            counterpart = m.user_id if is_admin else m.admin_id
            by_counterpart.setdefault(counterpart, []).append(m)

        summaries = []
        for counterpart_id, messages in by_counterpart.items():
            identity = self._identities._store.get(counterpart_id)
            if identity is None:
                continue
            last = messages[0]
            summaries.append(
                ConversationSummary(
                    counterpart_id=counterpart_id,
                    counterpart_name=identity.name,
                    counterpart_email=identity.email,
                    counterpart_profile=identity.profile,
                    counterpart_role=identity.role,
                    last_message=LastMessageDTO(
                        id=last.id,
                        message=last.message,
                        sender_id=last.sender_id,
                        sender_role=last.sender_role,
                        created_at=last.created_at,
                    ),
                    unread_count=sum(
                        1 for m in messages if not m.is_read and m.sender_role == incoming
                    ),
                )
            )
        return summaries

    async def stats(self, admin_id: UUID) -> ChatStatsDTO:
        live = [m for m in self._messages if not m.is_deleted]
        return ChatStatsDTO(
            total_chats=len({m.user_id for m in live}),
            online_users=0,
            unread_messages=sum(
                1 for m in live
                if m.admin_id == admin_id and m.sender_role == Role.USER and not m.is_read
            ),
            responded_chats=len({
                m.user_id for m in live
                if m.admin_id == admin_id and m.sender_role == Role.ADMIN
            }),
        )


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    def _replace_where(self, predicate, **changes) -> int:
        updated = 0
        messages = self._reader._messages
        for i, m in enumerate(messages):
            if predicate(m):
                messages[i] = dataclasses.replace(m, **changes)
                updated += 1
        return updated

    async def create(self, message: ChatMessage) -> ChatMessage:
        self._reader._messages.append(message)
        return message

    async def mark_read(
        self,
        user_id: UUID,
        admin_id: UUID,
        sender_role: Role,
        read_at: datetime,
    ) -> int:
        return self._replace_where(
            lambda m: (
                m.user_id == user_id
                and m.admin_id == admin_id
                and m.sender_role == sender_role
                and not m.is_read
                and not m.is_deleted
            ),
            is_read=True,
            read_at=read_at,
        )

    async def mark_read_ids(self, ids: list[UUID], read_at: datetime) -> int:
        wanted = set(ids)
        return self._replace_where(
            lambda m: m.id in wanted and not m.is_read, is_read=True, read_at=read_at,
        )

    async def soft_delete(self, message_id: UUID, deleted_at: datetime) -> None:
        self._replace_where(
            lambda m: m.id == message_id and not m.is_deleted,
            deleted_at=deleted_at,
            updated_at=deleted_at,
        )


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    identities: FakeIdentityReader = field(default_factory=FakeIdentityReader)
    messages: FakeMessageReader | None = None
    messages_w: FakeMessageWriter | None = None
    commits: int = 0

    def __post_init__(self) -> None:
        if self.messages is None:
            self.messages = FakeMessageReader(self.identities)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass

    def factory(self):
        """A UoWFactory that always hands out this instance."""

        @asynccontextmanager
        async def _open() -> AsyncIterator[FakeUoW]:
            yield self

        return _open


@pytest.fixture
def user() -> Identity:
    return make_identity(role=Role.USER, name="Frodo")


@pytest.fixture
def admin() -> Identity:
    return make_identity(role=Role.ADMIN, name="Gandalf")


@pytest.fixture
def uow(user: Identity, admin: Identity) -> FakeUoW:
    fake = FakeUoW()
    fake.identities.add(user, admin)
    return fake


@pytest.fixture
def user_principal(user: Identity) -> Principal:
    return Principal.from_identity(user)


@pytest.fixture
def admin_principal(admin: Identity) -> Principal:
    return Principal.from_identity(admin)
