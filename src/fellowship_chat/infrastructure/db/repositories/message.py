from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fellowship_chat.application.dto.conversation import (
    ChatStatsDTO,
    ConversationSummary,
    LastMessageDTO,
)
from fellowship_chat.domain.entities.chat_message import ChatMessage
from fellowship_chat.domain.value_objects.enums import Role
from fellowship_chat.infrastructure.db.mappers import chat_message as mapper
from fellowship_chat.infrastructure.db.models.chat_message import ChatMessageModel
from fellowship_chat.infrastructure.db.models.user import UserModel

M = ChatMessageModel


def _pair(user_id: UUID, admin_id: UUID):
    return and_(M.user_id == user_id, M.admin_id == admin_id, M.deleted_at.is_(None))


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> ChatMessage | None:
        result = await self._session.get(M, message_id)
        return mapper.model_to_entity(result) if result else None

    async def list_page(
        self,
        user_id: UUID,
        admin_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> list[ChatMessage]:
        stmt = (
            select(M)
            .where(_pair(user_id, admin_id))
            .order_by(M.created_at.desc(), M.seq.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count(self, user_id: UUID, admin_id: UUID) -> int:
        stmt = select(func.count()).select_from(M).where(_pair(user_id, admin_id))
        return (await self._session.execute(stmt)).scalar_one()

    async def list_conversations(
        self,
        viewer_id: UUID,
        viewer_role: Role,
    ) -> list[ConversationSummary]:
        if viewer_role == Role.ADMIN:
            viewer_col, counterpart_col, incoming_role = M.admin_id, M.user_id, Role.USER
        else:
            viewer_col, counterpart_col, incoming_role = M.user_id, M.admin_id, Role.ADMIN

        ranked = (
            select(
                M.id.label("message_id"),
                counterpart_col.label("counterpart_id"),
                M.message,
                M.sender_id,
                M.sender_role,
                M.created_at,
                func.row_number()
                .over(partition_by=counterpart_col, order_by=(M.created_at.desc(), M.seq.desc()))
                .label("rn"),
                func.count(M.id)
                .filter(and_(M.is_read.is_(False), M.sender_role == incoming_role.value))
                .over(partition_by=counterpart_col)
                .label("unread_count"),
            )
            .where(viewer_col == viewer_id, M.deleted_at.is_(None))
            .subquery()
        )
        stmt = (
            select(
                ranked,
                UserModel.name,
                UserModel.email,
                UserModel.profile,
                UserModel.role,
            )
            .join(UserModel, UserModel.id == ranked.c.counterpart_id)
            .where(ranked.c.rn == 1)
            .order_by(ranked.c.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [
            ConversationSummary(
                counterpart_id=row.counterpart_id,
                counterpart_name=row.name,
                counterpart_email=row.email,
                counterpart_profile=row.profile,
                counterpart_role=Role.ADMIN if row.role == Role.ADMIN else Role.USER,
                last_message=LastMessageDTO(
                    id=row.message_id,
                    message=row.message,
                    sender_id=row.sender_id,
                    sender_role=Role(row.sender_role),
                    created_at=row.created_at,
                ),
                unread_count=row.unread_count,
            )
            for row in result.all()
        ]

    async def stats(self, admin_id: UUID) -> ChatStatsDTO:
        total_chats = await self._session.scalar(
            select(func.count(distinct(M.user_id))).where(M.deleted_at.is_(None))
        )
        unread = await self._session.scalar(
            select(func.count())
            .select_from(M)
            .where(
                M.admin_id == admin_id,
                M.sender_role == Role.USER.value,
                M.is_read.is_(False),
                M.deleted_at.is_(None),
            )
        )
        responded = await self._session.scalar(
            select(func.count(distinct(M.user_id))).where(
                M.admin_id == admin_id,
                M.sender_role == Role.ADMIN.value,
                M.deleted_at.is_(None),
            )
        )
        return ChatStatsDTO(
            total_chats=total_chats or 0,
            online_users=0,
            unread_messages=unread or 0,
            responded_chats=responded or 0,
        )


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: ChatMessage) -> ChatMessage:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_read(
        self,
        user_id: UUID,
        admin_id: UUID,
        sender_role: Role,
        read_at: datetime,
    ) -> int:
        stmt = (
            update(M)
            .where(
                _pair(user_id, admin_id),
                M.sender_role == sender_role.value,
                M.is_read.is_(False),
            )
            .values(is_read=True, read_at=read_at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def mark_read_ids(self, ids: list[UUID], read_at: datetime) -> int:
        if not ids:
            return 0
        stmt = (
            update(M)
            .where(M.id.in_(ids), M.is_read.is_(False))
            .values(is_read=True, read_at=read_at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def soft_delete(self, message_id: UUID, deleted_at: datetime) -> None:
        stmt = (
            update(M)
            .where(M.id == message_id, M.deleted_at.is_(None))
            .values(deleted_at=deleted_at)
        )
        await self._session.execute(stmt)
