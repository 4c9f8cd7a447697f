from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from fellowship_chat.application.repositories.identity import IdentityReader
from fellowship_chat.application.repositories.message import MessageReader, MessageWriter


class UnitOfWork(Protocol):
    identities: IdentityReader
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
