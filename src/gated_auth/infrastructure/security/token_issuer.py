"""Signed session token issuance backed by PyJWT and the auth code store."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from gated_auth.application.ports.auth_code_repository_port import (
    AuthCodeCreateInput,
    AuthCodeRepositoryPort,
)
from gated_auth.application.ports.token_issuer_port import (
    BannedUserError,
    IssuedAuthToken,
    TokenIssuerPort,
)
from gated_auth.application.ports.user_repository_port import UserRepositoryPort

_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(days=7)


class InvalidAuthTokenError(PermissionError):
    """Raised when a session token fails signature or expiry checks."""


@dataclass(frozen=True)
class AuthTokenClaims:
    """Verified claims carried by one session token."""

    user_id: int
    code: str
    issued_at: datetime
    expires_at: datetime


def _default_code_factory() -> str:
    return secrets.token_urlsafe(32)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class JwtTokenIssuer(TokenIssuerPort):
    """Mint HS256 tokens bound to a one-time code and persist the code."""

    def __init__(
        self,
        *,
        secret: str,
        users: UserRepositoryPort,
        auth_codes: AuthCodeRepositoryPort,
        token_ttl: timedelta = DEFAULT_TOKEN_TTL,
        code_factory: Callable[[], str] = _default_code_factory,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._secret = secret
        self._users = users
        self._auth_codes = auth_codes
        self._token_ttl = token_ttl
        self._code_factory = code_factory
        self._now = now

    async def issue(self, *, user_id: int) -> IssuedAuthToken:
        """Create a token for an existing, non-banned user."""

        user = await self._users.get_by_id(user_id=user_id)
        if user is None:
            raise LookupError(f"user not found: {user_id}")
        if user.is_banned:
            raise BannedUserError(user_id=user_id)

        code = self._code_factory()
        issued_at = self._now()
        claims: dict[str, Any] = {
            "sub": str(user_id),
            "code": code,
            "iat": issued_at,
            "exp": issued_at + self._token_ttl,
        }
        token = jwt.encode(claims, self._secret, algorithm=_ALGORITHM)
        return IssuedAuthToken(token=token, code=code)

    async def store_code(self, payload: AuthCodeCreateInput) -> None:
        await self._auth_codes.create_code(payload)

    def decode_token(self, token: str) -> AuthTokenClaims:
        """Verify signature and expiry, then return the token claims."""

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                options={"require": ["sub", "code", "iat", "exp"]},
            )
        except jwt.PyJWTError as error:
            raise InvalidAuthTokenError("invalid or expired auth token") from error

        return AuthTokenClaims(
            user_id=int(claims["sub"]),
            code=str(claims["code"]),
            issued_at=datetime.fromtimestamp(claims["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=UTC),
        )
