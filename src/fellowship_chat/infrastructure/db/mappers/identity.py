from __future__ import annotations

from fellowship_chat.domain.entities.identity import Identity
from fellowship_chat.domain.value_objects.enums import Role
from fellowship_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> Identity:
    return Identity(
        id=model.id,
        name=model.name,
        email=model.email,
        profile=model.profile,
        role=Role.ADMIN if model.role == Role.ADMIN else Role.USER,
        deleted_at=model.deleted_at,
    )
