"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fellowship_chat.application.dto.principal import Principal
from fellowship_chat.application.ports.auth import TokenVerifier
from fellowship_chat.application.ports.media import MediaUrlResolver
from fellowship_chat.application.uow import UnitOfWork, UoWFactory
from fellowship_chat.config import settings
from fellowship_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from fellowship_chat.infrastructure.auth.jwks_verifier import JWKSVerifier
from fellowship_chat.infrastructure.db.session import AsyncSessionLocal
from fellowship_chat.infrastructure.db.uow import uow_factory
from fellowship_chat.infrastructure.ws.delivery import EventDelivery
from fellowship_chat.infrastructure.ws.registry import InMemoryConnectionRegistry
from fellowship_chat.services import identity_service

_bearer_scheme = HTTPBearer(auto_error=False)

_uow_factory: UoWFactory = uow_factory(AsyncSessionLocal)


def get_uow_factory() -> UoWFactory:
    return _uow_factory


async def get_uow(
    factory: Annotated[UoWFactory, Depends(get_uow_factory)],
) -> AsyncIterator[UnitOfWork]:
    async with factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    uow: UoWDep,
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> Principal:
    token = credentials.credentials if credentials else None
    return await identity_service.authenticate(token, verifier, uow)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_media(request: Request) -> MediaUrlResolver | None:
    return request.app.state.media


def get_delivery(request: Request) -> EventDelivery:
    return request.app.state.delivery


def get_registry(request: Request) -> InMemoryConnectionRegistry:
    return request.app.state.registry


MediaDep = Annotated[MediaUrlResolver | None, Depends(get_media)]
DeliveryDep = Annotated[EventDelivery, Depends(get_delivery)]
RegistryDep = Annotated[InMemoryConnectionRegistry, Depends(get_registry)]
