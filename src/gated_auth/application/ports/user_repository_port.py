"""Port for user lookup and creation used by the auth protocols."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


class UsernameTakenError(ValueError):
    """Raised when the store's uniqueness constraint rejects a username."""

    def __init__(self, *, username: str) -> None:
        super().__init__(f"username already exists: {username}")
        self.username = username


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: int
    username: str
    password_hash: str
    is_banned: bool
    score: int | None
    domain: str
    created_at: datetime


@dataclass(frozen=True)
class UserCreateInput:
    """Input payload for inserting one user row."""

    username: str
    password_hash: str
    domain: str
    score: int


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        """Return user by id, including banned users."""

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by normalized username, including banned users."""

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user row or raise `UsernameTakenError` on a unique conflict."""

    async def delete_user(self, *, user_id: int) -> bool:
        """Delete one user row and return whether it existed."""
