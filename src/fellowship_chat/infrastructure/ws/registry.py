"""In-process connection registry."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class InMemoryConnectionRegistry:
    """Last-connected-wins map between identities and connection ids.

    Mutated only from the event loop, so no locking.
    """

    def __init__(self) -> None:
        self._by_identity: dict[str, str] = {}
        self._by_connection: dict[str, str] = {}

    def register(self, identity_key: str, connection_id: str) -> None:
        previous = self._by_identity.get(identity_key)
        if previous is not None and previous != connection_id:
            logger.debug("Identity %s superseded connection %s", identity_key, previous)
        self._by_identity[identity_key] = connection_id
        self._by_connection[connection_id] = identity_key

    def unregister(self, connection_id: str) -> str | None:
        identity_key = self._by_connection.pop(connection_id, None)
        if identity_key is None:
            return None
        # A newer connection for the same identity keeps its mapping.
        if self._by_identity.get(identity_key) == connection_id:
            del self._by_identity[identity_key]
        return identity_key

    def lookup_by_identity(self, identity_key: str) -> str | None:
        return self._by_identity.get(identity_key)

    def lookup_by_connection(self, connection_id: str) -> str | None:
        return self._by_connection.get(connection_id)

    def online(self) -> list[str]:
        return list(self._by_identity)

    def __len__(self) -> int:
        return len(self._by_identity)
