"""Port for one-time auth code persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class AuthCodeCreateInput:
    """Input payload binding one auth code to a user and client context."""

    user_id: int
    code: str
    ip_address: str | None
    user_agent: str | None


@dataclass(frozen=True)
class AuthCodeRecord:
    """Persisted auth code model."""

    id: int
    user_id: int
    code: str
    ip_address: str | None
    user_agent: str | None
    created_at: datetime


class AuthCodeRepositoryPort(Protocol):
    """Auth code persistence contract."""

    async def create_code(self, payload: AuthCodeCreateInput) -> AuthCodeRecord:
        """Persist a new auth code row."""

    async def get_by_code(self, *, code: str) -> AuthCodeRecord | None:
        """Return the auth code row for one code value."""
