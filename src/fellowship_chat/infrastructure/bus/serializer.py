"""Wire format of fanned-out chat events.

One JSON object per Pub/Sub message::

    {"event": ..., "group": ..., "skip_connection": ..., "skip_group": ..., "data": {...}}

``group`` is null for broadcasts to every connection.
"""
from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

_ROUTING_KEYS = ("group", "skip_connection", "skip_group")


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


def encode_fanout(payload: dict[str, Any]) -> str:
    """Encode a delivery payload as produced by ``EventDelivery``."""
    envelope = {"event": payload["event_type"], "data": payload.get("data") or {}}
    for key in _ROUTING_KEYS:
        envelope[key] = payload.get(key)
    return json.dumps(envelope, cls=_Encoder, separators=(",", ":"))


def decode_fanout(raw: str | bytes) -> dict[str, Any]:
    envelope = json.loads(raw)
    if not isinstance(envelope, dict) or not envelope.get("event"):
        raise ValueError("fan-out message without an event name")
    payload = {"event_type": envelope["event"], "data": envelope.get("data") or {}}
    for key in _ROUTING_KEYS:
        payload[key] = envelope.get(key)
    return payload
