from __future__ import annotations

from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.application.exceptions import ForbiddenError, NotFoundError
from fellowship_chat.domain.entities.conversation import ConversationPair
from fellowship_chat.domain.entities.identity import Identity


def checked_counterpart(principal: Principal, counterpart: Identity | None) -> Identity:
    """Raise unless the counterpart exists and sits on the opposite side of the user/admin line."""
    if principal.is_admin:
        if counterpart is None or counterpart.is_deleted:
            raise NotFoundError("Invalid user or user is an admin")
        if counterpart.is_admin:
            raise ForbiddenError("Invalid user or user is an admin")
    else:
        if counterpart is None or counterpart.is_deleted:
            raise NotFoundError("You can only chat with admins")
        if not counterpart.is_admin:
            raise ForbiddenError("You can only chat with admins")
    return counterpart


def assert_valid_pairing(principal: Principal, counterpart: Identity | None) -> ConversationPair:
    checked = checked_counterpart(principal, counterpart)
    return ConversationPair.for_viewer(principal.subject_id, principal.kind, checked.id)


def assert_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Only admins can access chat statistics")
