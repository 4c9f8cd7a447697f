from __future__ import annotations

import logging
from uuid import UUID

import jwt
from jwt import PyJWKClient

from fellowship_chat.application.exceptions import AuthenticationError
from fellowship_chat.infrastructure.auth.claims import INVALID_TOKEN, subject_from_claims

logger = logging.getLogger(__name__)


class JWKSVerifier:
    """Verify JWTs using a remote JWKS endpoint."""

    def __init__(self, jwks_url: str) -> None:
        self._jwks_url = jwks_url
        self._jwk_client = PyJWKClient(jwks_url)

    async def verify(self, token: str) -> UUID:
        try:
            signing_key = self._jwk_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256", "ES256"],
            )
        except jwt.PyJWTError as exc:
            logger.debug("JWKS verification failed against %s", self._jwks_url, exc_info=True)
            raise AuthenticationError(INVALID_TOKEN) from exc
        return subject_from_claims(payload)
