from __future__ import annotations

import logging

from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.application.exceptions import AuthenticationError
from fellowship_chat.application.ports.auth import TokenVerifier
from fellowship_chat.application.uow import UnitOfWork

logger = logging.getLogger(__name__)


def extract_bearer(raw: str | None) -> str | None:
    """Accept either ``Bearer <token>`` or a bare token."""
    if not raw:
        return None
    scheme, _, rest = raw.strip().partition(" ")
    if rest and scheme.lower() == "bearer":
        return rest.strip() or None
    return raw.strip() or None


async def authenticate(
    token: str | None,
    verifier: TokenVerifier,
    uow: UnitOfWork,
) -> Principal:
    """Resolve a bearer credential to a live identity.

    The verifier raises ``AuthenticationError`` for invalid, expired or
    unparseable tokens; a subject that is gone or soft-deleted is rejected here.
    """
    if not token:
        raise AuthenticationError("Authentication error: No token provided")

    subject_id = await verifier.verify(token)
    identity = await uow.identities.get_by_id(subject_id)
    if identity is None:
        raise AuthenticationError("Authentication error: User not found")
    if identity.is_deleted:
        raise AuthenticationError("Authentication error: User account is deleted")

    logger.debug("Authenticated %s (%s)", identity.id, identity.role)
    return Principal.from_identity(identity)
