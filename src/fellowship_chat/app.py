from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fellowship_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from fellowship_chat.api.v1.routers import chat, health, ws
from fellowship_chat.api.v1.schemas.common import ErrorResponse
from fellowship_chat.application.exceptions import (
    AppError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from fellowship_chat.config import settings
from fellowship_chat.infrastructure.bus.redis_pubsub import (
    RedisFanoutSubscriber,
    RedisPubSubPublisher,
)
from fellowship_chat.infrastructure.db.session import dispose_engine
from fellowship_chat.infrastructure.media.url_resolver import BaseUrlMediaResolver
from fellowship_chat.infrastructure.ws.delivery import EventDelivery
from fellowship_chat.infrastructure.ws.manager import ConnectionManager
from fellowship_chat.infrastructure.ws.registry import InMemoryConnectionRegistry

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[AppError], int] = {
    ValidationError: 400,
    AuthenticationError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    subscriber: RedisFanoutSubscriber | None = app.state.subscriber
    if subscriber is not None:
        await subscriber.start()

    yield

    if subscriber is not None:
        await subscriber.stop()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Fellowship Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    manager = ConnectionManager()
    app.state.registry = InMemoryConnectionRegistry()
    app.state.media = (
        BaseUrlMediaResolver(settings.MEDIA_BASE_URL) if settings.MEDIA_BASE_URL else None
    )
    app.state.redis = None
    app.state.subscriber = None

    if settings.CHAT_FANOUT == "redis":
        app.state.redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        app.state.subscriber = RedisFanoutSubscriber(
            app.state.redis, settings.REDIS_PUBSUB_CHANNEL, manager,
        )
        app.state.delivery = EventDelivery(
            manager,
            RedisPubSubPublisher(app.state.redis),
            settings.REDIS_PUBSUB_CHANNEL,
        )
        logger.info("Chat fan-out via Redis channel=%s", settings.REDIS_PUBSUB_CHANNEL)
    else:
        app.state.delivery = EventDelivery(manager)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(ws.router)

    return app


def _error(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, error=error).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_req: Request, exc: AppError) -> JSONResponse:
        return _error(_STATUS_BY_ERROR.get(type(exc), 400), exc.detail)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(_req: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        return _error(400, first.get("msg", "Invalid request"))

    @app.exception_handler(StarletteHTTPException)
    async def _http(_req: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled(req: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", req.method, req.url.path)
        return _error(
            500,
            "Internal server error",
            str(exc) if settings.is_development else None,
        )
