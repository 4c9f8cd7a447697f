from __future__ import annotations

from uuid import UUID

import jwt

from fellowship_chat.application.exceptions import AuthenticationError
from fellowship_chat.infrastructure.auth.claims import INVALID_TOKEN, subject_from_claims


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> UUID:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError as exc:
            raise AuthenticationError(INVALID_TOKEN) from exc
        return subject_from_claims(payload)
