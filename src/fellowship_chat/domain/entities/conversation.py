from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from fellowship_chat.domain.value_objects.enums import Role
from fellowship_chat.domain.value_objects.rooms import room_id


@dataclass(frozen=True, slots=True)
class ConversationPair:
    """A conversation is identified by its (user, admin) pair, never stored on its own."""

    user_id: UUID
    admin_id: UUID

    @classmethod
    def for_viewer(cls, viewer_id: UUID, viewer_role: Role, counterpart_id: UUID) -> ConversationPair:
        if viewer_role == Role.ADMIN:
            return cls(user_id=counterpart_id, admin_id=viewer_id)
        return cls(user_id=viewer_id, admin_id=counterpart_id)

    @property
    def room_id(self) -> str:
        return room_id(self.user_id, self.admin_id)

    def counterpart_of(self, identity_id: UUID) -> UUID:
        return self.admin_id if identity_id == self.user_id else self.user_id
