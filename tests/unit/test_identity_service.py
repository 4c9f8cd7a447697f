from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

import jwt
import pytest

from fellowship_chat.application.exceptions import AuthenticationError
from fellowship_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from fellowship_chat.services import identity_service

SECRET = "unit-test-secret-with-enough-entropy-42"


class StaticVerifier:
    def __init__(self, subject: UUID) -> None:
        self.subject = subject

    async def verify(self, token: str) -> UUID:
        return self.subject


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, None),
        ("", None),
        ("Bearer abc", "abc"),
        ("bearer abc", "abc"),
        ("abc", "abc"),
        ("  abc  ", "abc"),
    ],
)
def test_extract_bearer(raw, expected):
    assert identity_service.extract_bearer(raw) == expected


@pytest.mark.asyncio
async def test_authenticate_returns_principal(uow, user):
    principal = await identity_service.authenticate("tok", StaticVerifier(user.id), uow)

    assert principal.subject_id == user.id
    assert principal.kind == user.role
    assert principal.name == user.name


@pytest.mark.asyncio
async def test_authenticate_without_token(uow, user):
    with pytest.raises(AuthenticationError) as exc:
        await identity_service.authenticate(None, StaticVerifier(user.id), uow)
    assert exc.value.detail == "Authentication error: No token provided"


@pytest.mark.asyncio
async def test_authenticate_unknown_subject(uow):
    with pytest.raises(AuthenticationError) as exc:
        await identity_service.authenticate("tok", StaticVerifier(uuid.uuid4()), uow)
    assert exc.value.detail == "Authentication error: User not found"


@pytest.mark.asyncio
async def test_authenticate_deleted_subject(uow, user):
    uow.identities.add(replace(user, deleted_at=datetime.now(timezone.utc)))

    with pytest.raises(AuthenticationError) as exc:
        await identity_service.authenticate("tok", StaticVerifier(user.id), uow)
    assert exc.value.detail == "Authentication error: User account is deleted"


@pytest.mark.asyncio
async def test_hs256_verifier_accepts_sub_or_id():
    verifier = HS256Verifier(SECRET)
    subject = uuid.uuid4()

    by_sub = jwt.encode({"sub": str(subject)}, SECRET, algorithm="HS256")
    by_id = jwt.encode({"id": str(subject)}, SECRET, algorithm="HS256")

    assert await verifier.verify(by_sub) == subject
    assert await verifier.verify(by_id) == subject


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        jwt.encode({"sub": str(uuid.uuid4())}, "another-secret-with-enough-entropy-42", algorithm="HS256"),
        jwt.encode({"sub": "42"}, SECRET, algorithm="HS256"),
        jwt.encode({"role": "user"}, SECRET, algorithm="HS256"),
    ],
)
async def test_hs256_verifier_rejects(token):
    with pytest.raises(AuthenticationError) as exc:
        await HS256Verifier(SECRET).verify(token)
    assert exc.value.detail == "Authentication error: Invalid token"
