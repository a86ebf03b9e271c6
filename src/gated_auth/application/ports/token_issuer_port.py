"""Port for signed session token issuance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from gated_auth.application.ports.auth_code_repository_port import AuthCodeCreateInput


class BannedUserError(PermissionError):
    """Raised when the issuer refuses to mint a token for a banned user."""

    def __init__(self, *, user_id: int) -> None:
        super().__init__(f"user is banned and cannot receive a token: {user_id}")
        self.user_id = user_id


@dataclass(frozen=True)
class IssuedAuthToken:
    """Signed token plus its companion one-time code."""

    token: str
    code: str


class TokenIssuerPort(Protocol):
    """Token issuance contract."""

    async def issue(self, *, user_id: int) -> IssuedAuthToken:
        """Create a signed token and code for one user or raise `BannedUserError`."""

    async def store_code(self, payload: AuthCodeCreateInput) -> None:
        """Persist the code bound to user id and client context."""
