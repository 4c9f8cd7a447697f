from __future__ import annotations

from typing import Any
from uuid import UUID

from fellowship_chat.application.exceptions import AuthenticationError

INVALID_TOKEN = "Authentication error: Invalid token"


def subject_from_claims(payload: dict[str, Any]) -> UUID:
    """Tokens issued by the identity service carry the account id in ``sub`` or ``id``."""
    raw = payload.get("sub") or payload.get("id")
    if not raw:
        raise AuthenticationError(INVALID_TOKEN)
    try:
        return UUID(str(raw))
    except ValueError as exc:
        raise AuthenticationError(INVALID_TOKEN) from exc
