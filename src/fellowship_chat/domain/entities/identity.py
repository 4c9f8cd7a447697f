from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from fellowship_chat.domain.value_objects.enums import Role


@dataclass(frozen=True, slots=True)
class Identity:
    """Read-only projection of an account from the identity store."""

    id: UUID
    name: str
    email: str | None
    profile: str | None
    role: Role
    deleted_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
