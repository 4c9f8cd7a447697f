from __future__ import annotations

from typing import Protocol


class ConnectionRegistry(Protocol):
    """Identity <-> live connection map used for presence.

    Not a source of truth: it lives in process memory and starts empty after
    every restart; clients rebuild it by reconnecting.
    """

    def register(self, identity_key: str, connection_id: str) -> None: ...

    def unregister(self, connection_id: str) -> str | None: ...

    def lookup_by_identity(self, identity_key: str) -> str | None: ...

    def lookup_by_connection(self, connection_id: str) -> str | None: ...

    def online(self) -> list[str]: ...
