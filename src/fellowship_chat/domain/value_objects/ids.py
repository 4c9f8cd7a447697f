from __future__ import annotations

from typing import NewType
from uuid import UUID

RoomId = NewType("RoomId", str)


def parse_identity_id(raw: object) -> UUID | None:
    """Return the UUID for a client-supplied identity reference, or None if malformed."""
    if isinstance(raw, UUID):
        return raw
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        return None
