from __future__ import annotations

from typing import Protocol


class MediaUrlResolver(Protocol):
    async def resolve(self, reference: str) -> str:
        """Turn a stored media reference into a fetchable URL."""
        ...
