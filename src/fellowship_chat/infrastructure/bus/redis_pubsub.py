"""Redis Pub/Sub fan-out for group and broadcast chat events."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis

from fellowship_chat.infrastructure.bus.serializer import decode_fanout, encode_fanout
from fellowship_chat.infrastructure.ws.manager import ConnectionManager

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    """Implements application.ports.bus.EventPublisher."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def publish(self, channel: str, payload: dict[str, Any]) -> None:
        await self._redis.publish(channel, encode_fanout(payload))


class RedisFanoutSubscriber:
    """Background task that replays fanned-out events to this process's sockets."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        manager: ConnectionManager,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._manager = manager
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-chat-fanout")
        logger.info("Chat fan-out subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Chat fan-out subscriber stopped")

    async def dispatch(self, payload: dict[str, Any]) -> None:
        await self._manager.emit(
            payload["group"],
            payload["event_type"],
            payload["data"],
            skip_connection=payload["skip_connection"],
            skip_group=payload["skip_group"],
        )

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    await self.dispatch(decode_fanout(message["data"]))
                except Exception:
                    logger.exception("Error processing fan-out message")
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
