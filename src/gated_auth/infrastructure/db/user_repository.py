"""SQLAlchemy adapter for user lookup and creation."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gated_auth.application.ports.user_repository_port import (
    UserCreateInput,
    UsernameTakenError,
    UserRecord,
    UserRepositoryPort,
)
from gated_auth.infrastructure.db.metadata import users

_USER_COLUMNS = (
    users.c.id,
    users.c.username,
    users.c.password_hash,
    users.c.is_banned,
    users.c.iq,
    users.c.domain,
    users.c.created_at,
)


def _is_duplicate_username_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "username" in message


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        """Return user by id, including banned users."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.id == user_id).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by normalized username, including banned users."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.username == username).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user row; the unique constraint is the authoritative guard."""

        statement = (
            sa.insert(users)
            .values(
                username=payload.username,
                password_hash=payload.password_hash,
                domain=payload.domain,
                iq=payload.score,
            )
            .returning(*_USER_COLUMNS)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                if _is_duplicate_username_error(error):
                    raise UsernameTakenError(username=payload.username) from error
                raise

        row = result.mappings().one()
        return _to_user_record(row)

    async def delete_user(self, *, user_id: int) -> bool:
        """Delete one user row and return whether it existed."""

        statement = sa.delete(users).where(users.c.id == user_id)

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return bool(result.rowcount)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_score = row["iq"]
    return UserRecord(
        user_id=int(row["id"]),
        username=cast(str, row["username"]),
        password_hash=cast(str, row["password_hash"]),
        is_banned=bool(row["is_banned"]),
        score=int(raw_score) if raw_score is not None else None,
        domain=cast(str, row["domain"]),
        created_at=cast(datetime, row["created_at"]),
    )
