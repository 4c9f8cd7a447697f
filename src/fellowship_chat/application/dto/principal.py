from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from fellowship_chat.domain.entities.identity import Identity
from fellowship_chat.domain.value_objects.enums import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller, bound once at handshake/request time.

    The role is taken from the identity record when the principal is built and
    is not re-read afterwards; a role change needs a reconnect.
    """

    kind: Role
    subject_id: UUID
    name: str
    email: str | None = None
    profile: str | None = None

    @classmethod
    def from_identity(cls, identity: Identity) -> Principal:
        return cls(
            kind=identity.role,
            subject_id=identity.id,
            name=identity.name,
            email=identity.email,
            profile=identity.profile,
        )

    @property
    def is_admin(self) -> bool:
        return self.kind == Role.ADMIN

    @property
    def principal_key(self) -> str:
        """Unique key for the connection registry."""
        return str(self.subject_id)
