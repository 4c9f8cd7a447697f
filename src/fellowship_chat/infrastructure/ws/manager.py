"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import WebSocket

from fellowship_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the live sockets of this process and their group memberships.

    Groups cover conversation rooms, personal channels and the admin channel.
    """

    def __init__(self) -> None:
        self._sockets: dict[str, WebSocket] = {}
        self._groups: dict[str, set[str]] = {}
        self._memberships: dict[str, set[str]] = {}

    async def connect(self, ws: WebSocket) -> str:
        await ws.accept()
        connection_id = uuid.uuid4().hex
        self._sockets[connection_id] = ws
        self._memberships[connection_id] = set()
        logger.debug("WS connected: %s (total=%d)", connection_id, len(self._sockets))
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)
        for group in self._memberships.pop(connection_id, set()):
            members = self._groups.get(group)
            if members:
                members.discard(connection_id)
                if not members:
                    del self._groups[group]
        logger.debug("WS disconnected: %s", connection_id)

    def join(self, connection_id: str, group: str) -> None:
        if connection_id not in self._sockets:
            return
        self._groups.setdefault(group, set()).add(connection_id)
        self._memberships[connection_id].add(group)

    def is_member(self, connection_id: str, group: str) -> bool:
        return connection_id in self._groups.get(group, set())

    def members(self, group: str) -> set[str]:
        return set(self._groups.get(group, set()))

    async def send(self, connection_id: str, event_type: str, data: dict[str, Any]) -> None:
        """Send a WS message to one connection."""
        ws = self._sockets.get(connection_id)
        if ws is None:
            return
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        try:
            await ws.send_text(raw)
        except Exception:  # noqa: BLE001
            logger.warning("Dropping dead connection %s", connection_id)
            self.disconnect(connection_id)

    async def emit(
        self,
        group: str | None,
        event_type: str,
        data: dict[str, Any],
        *,
        skip_connection: str | None = None,
        skip_group: str | None = None,
    ) -> None:
        """Send to every member of ``group`` (every connection when ``group`` is None)."""
        targets = set(self._sockets) if group is None else self.members(group)
        if skip_connection is not None:
            targets.discard(skip_connection)
        if skip_group is not None:
            targets -= self.members(skip_group)

        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        dead: list[str] = []
        for connection_id in targets:
            ws = self._sockets.get(connection_id)
            if ws is None:
                continue
            try:
                await ws.send_text(raw)
            except Exception:  # noqa: BLE001
                dead.append(connection_id)
        for connection_id in dead:
            logger.warning("Dropping dead connection %s", connection_id)
            self.disconnect(connection_id)
