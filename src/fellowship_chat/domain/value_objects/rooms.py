"""Deterministic broadcast-group names."""
from __future__ import annotations

from uuid import UUID

from fellowship_chat.domain.value_objects.ids import RoomId

ADMIN_CHANNEL = "admin_room"


def room_id(user_id: UUID | str, admin_id: UUID | str) -> RoomId:
    """Canonical room for a user/admin pair; independent of argument order."""
    first, second = sorted((str(user_id), str(admin_id)))
    return RoomId(f"chat_{first}_{second}")


def personal_channel(identity_id: UUID | str) -> str:
    return f"user_{identity_id}"
