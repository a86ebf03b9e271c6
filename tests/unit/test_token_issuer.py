from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from gated_auth.application.ports.auth_code_repository_port import (
    AuthCodeCreateInput,
    AuthCodeRecord,
)
from gated_auth.application.ports.token_issuer_port import BannedUserError
from gated_auth.application.ports.user_repository_port import UserRecord
from gated_auth.infrastructure.security.token_issuer import InvalidAuthTokenError, JwtTokenIssuer

SECRET = "test-signing-secret-that-is-long-enough"


@dataclass
class FakeUserRepository:
    users: dict[int, UserRecord] = field(default_factory=dict)

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        return self.users.get(user_id)


class FakeAuthCodeRepository:
    def __init__(self) -> None:
        self.created: list[AuthCodeCreateInput] = []

    async def create_code(self, payload: AuthCodeCreateInput) -> AuthCodeRecord:
        self.created.append(payload)
        return AuthCodeRecord(
            id=len(self.created),
            user_id=payload.user_id,
            code=payload.code,
            ip_address=payload.ip_address,
            user_agent=payload.user_agent,
            created_at=datetime.now(tz=UTC),
        )

    async def get_by_code(self, *, code: str) -> AuthCodeRecord | None:
        return None


def _user(*, user_id: int = 3, is_banned: bool = False) -> UserRecord:
    return UserRecord(
        user_id=user_id,
        username="alice",
        password_hash="hash",
        is_banned=is_banned,
        score=120,
        domain="example.org",
        created_at=datetime.now(tz=UTC),
    )


def _issuer(
    users: FakeUserRepository,
    auth_codes: FakeAuthCodeRepository | None = None,
    **kwargs: object,
) -> JwtTokenIssuer:
    return JwtTokenIssuer(
        secret=SECRET,
        users=users,
        auth_codes=auth_codes or FakeAuthCodeRepository(),
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_issue_signs_token_bound_to_user_and_code() -> None:
    issuer = _issuer(FakeUserRepository({3: _user()}), code_factory=lambda: "fixed-code")

    issued = await issuer.issue(user_id=3)

    assert issued.code == "fixed-code"
    claims = issuer.decode_token(issued.token)
    assert claims.user_id == 3
    assert claims.code == "fixed-code"
    assert claims.expires_at - claims.issued_at == timedelta(days=7)


@pytest.mark.asyncio
async def test_issue_generates_distinct_codes() -> None:
    issuer = _issuer(FakeUserRepository({3: _user()}))

    first = await issuer.issue(user_id=3)
    second = await issuer.issue(user_id=3)

    assert first.code != second.code


@pytest.mark.asyncio
async def test_issue_refuses_banned_user_with_typed_error() -> None:
    issuer = _issuer(FakeUserRepository({3: _user(is_banned=True)}))

    with pytest.raises(BannedUserError) as exc_info:
        await issuer.issue(user_id=3)

    assert exc_info.value.user_id == 3


@pytest.mark.asyncio
async def test_issue_unknown_user_raises_lookup_error() -> None:
    issuer = _issuer(FakeUserRepository())

    with pytest.raises(LookupError):
        await issuer.issue(user_id=99)


@pytest.mark.asyncio
async def test_store_code_persists_client_context() -> None:
    auth_codes = FakeAuthCodeRepository()
    issuer = _issuer(FakeUserRepository({3: _user()}), auth_codes)
    payload = AuthCodeCreateInput(
        user_id=3,
        code="fixed-code",
        ip_address="203.0.113.9",
        user_agent="pytest",
    )

    await issuer.store_code(payload)

    assert auth_codes.created == [payload]


def test_decode_rejects_token_signed_with_other_secret() -> None:
    issuer = _issuer(FakeUserRepository())
    now = datetime.now(tz=UTC)
    forged = jwt.encode(
        {"sub": "3", "code": "c", "iat": now, "exp": now + timedelta(hours=1)},
        "another-secret-that-is-long-enough-too",
        algorithm="HS256",
    )

    with pytest.raises(InvalidAuthTokenError):
        issuer.decode_token(forged)


@pytest.mark.asyncio
async def test_decode_rejects_expired_token() -> None:
    issued_at = datetime.now(tz=UTC) - timedelta(days=8)
    issuer = _issuer(FakeUserRepository({3: _user()}), now=lambda: issued_at)

    issued = await issuer.issue(user_id=3)

    with pytest.raises(InvalidAuthTokenError):
        issuer.decode_token(issued.token)
