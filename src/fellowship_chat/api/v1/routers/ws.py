from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError

from fellowship_chat.api.deps import get_uow_factory, get_verifier
from fellowship_chat.application.dto.events import CHAT_ERROR, CONNECT_ERROR
from fellowship_chat.application.exceptions import AuthenticationError
from fellowship_chat.application.ports.auth import TokenVerifier
from fellowship_chat.application.uow import UoWFactory
from fellowship_chat.config import settings
from fellowship_chat.infrastructure.ws.delivery import EventDelivery
from fellowship_chat.infrastructure.ws.protocol import WsInbound, WsOutbound
from fellowship_chat.services import identity_service
from fellowship_chat.services.chat_session import ChatSession

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    uow_factory: Annotated[UoWFactory, Depends(get_uow_factory)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
    token: str | None = Query(None),
) -> None:
    state = websocket.app.state
    delivery: EventDelivery = state.delivery

    raw_token = token or websocket.headers.get("authorization")
    try:
        async with uow_factory() as uow:
            principal = await identity_service.authenticate(
                identity_service.extract_bearer(raw_token), verifier, uow,
            )
    except AuthenticationError as exc:
        logger.info("WS handshake rejected: %s", exc.detail)
        await _reject(websocket, exc.detail)
        return
    except Exception:
        logger.exception("WS handshake failed")
        await _reject(websocket, "Authentication error: Service unavailable", code=1011)
        return

    connection_id = await delivery.manager.connect(websocket)
    session = ChatSession(
        principal,
        connection_id,
        state.registry,
        uow_factory,
        state.media,
    )
    opened = session.connect()
    await delivery.apply(connection_id, opened.joins, opened.emits)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{connection_id}",
    )
    try:
        await _read_loop(websocket, session, delivery)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.subject_id)
    finally:
        heartbeat_task.cancel()
        closed = session.disconnect()
        delivery.manager.disconnect(connection_id)
        try:
            await delivery.apply(None, closed.joins, closed.emits)
        except Exception:
            logger.exception("WS presence update failed for %s", principal.subject_id)


async def _reject(ws: WebSocket, error: str, code: int = AUTH_FAILED_CLOSE_CODE) -> None:
    await ws.accept()
    await ws.send_text(WsOutbound(type=CONNECT_ERROR, data={"error": error}).model_dump_json())
    await ws.close(code=code, reason=error[:120])


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(WsOutbound(type="pong", data={}).model_dump_json())
    except asyncio.CancelledError:
        pass
    except Exception:  # noqa: BLE001
        logger.debug("Heartbeat stopped", exc_info=True)


async def _read_loop(ws: WebSocket, session: ChatSession, delivery: EventDelivery) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except PayloadError:
            await ws.send_text(
                WsOutbound(type=CHAT_ERROR, data={"error": "Invalid payload"}).model_dump_json()
            )
            continue

        if msg.type == "ping":
            await ws.send_text(WsOutbound(type="pong", data={}).model_dump_json())
            continue

        result = await session.handle(msg.type, msg.data)
        await delivery.apply(session.connection_id, result.joins, result.emits)
