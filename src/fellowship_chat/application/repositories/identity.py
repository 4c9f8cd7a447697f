from __future__ import annotations

from typing import Protocol
from uuid import UUID

from fellowship_chat.domain.entities.identity import Identity


class IdentityReader(Protocol):
    async def get_by_id(self, identity_id: UUID) -> Identity | None: ...
