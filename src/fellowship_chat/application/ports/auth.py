from __future__ import annotations

from typing import Protocol
from uuid import UUID


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> UUID:
        """Return the token subject; raise on invalid, expired or malformed tokens."""
        ...
