from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from fellowship_chat.domain.entities.identity import Identity
from fellowship_chat.infrastructure.db.mappers import identity as mapper
from fellowship_chat.infrastructure.db.models.user import UserModel


class IdentityReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, identity_id: UUID) -> Identity | None:
        result = await self._session.get(UserModel, identity_id)
        return mapper.model_to_entity(result) if result else None
