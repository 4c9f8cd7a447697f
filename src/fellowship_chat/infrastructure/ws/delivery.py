"""Applies session results to the transport."""
from __future__ import annotations

import logging
from typing import Iterable

from fellowship_chat.application.dto.events import Emit, TargetKind
from fellowship_chat.application.ports.bus import EventPublisher
from fellowship_chat.infrastructure.ws.manager import ConnectionManager

logger = logging.getLogger(__name__)


class EventDelivery:
    """Routes emits to one connection, a group, or everyone.

    Origin-targeted emits are always local. Group and broadcast emits go to the
    local manager, or through the publisher when cross-process fan-out is on;
    every process (this one included) then delivers them from its subscriber.
    A failed group or broadcast delivery is logged and skipped, so the
    remaining emits of the same result still go out.
    """

    def __init__(
        self,
        manager: ConnectionManager,
        publisher: EventPublisher | None = None,
        channel: str = "",
    ) -> None:
        self._manager = manager
        self._publisher = publisher
        self._channel = channel

    @property
    def manager(self) -> ConnectionManager:
        return self._manager

    async def apply(
        self,
        origin: str | None,
        joins: Iterable[str] = (),
        emits: Iterable[Emit] = (),
    ) -> None:
        if origin is not None:
            for group in joins:
                self._manager.join(origin, group)
        for emit in emits:
            await self.deliver(emit, origin)

    async def deliver(self, emit: Emit, origin: str | None = None) -> None:
        target = emit.target
        if target.kind == TargetKind.SELF:
            if origin is not None:
                await self._manager.send(origin, emit.event, emit.data)
            return

        group = target.group if target.kind == TargetKind.GROUP else None
        skip_connection = origin if target.skip_self else None

        try:
            if self._publisher is None:
                await self._manager.emit(
                    group, emit.event, emit.data,
                    skip_connection=skip_connection, skip_group=target.skip_group,
                )
                return

            await self._publisher.publish(
                self._channel,
                {
                    "event_type": emit.event,
                    "group": group,
                    "skip_connection": skip_connection,
                    "skip_group": target.skip_group,
                    "data": emit.data,
                },
            )
        except Exception:
            # Fan-out is best-effort; the event has already been committed.
            logger.exception("Failed to deliver %s to %s", emit.event, group or "everyone")
