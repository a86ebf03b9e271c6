"""SQLAlchemy adapter for one-time auth code persistence."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gated_auth.application.ports.auth_code_repository_port import (
    AuthCodeCreateInput,
    AuthCodeRecord,
    AuthCodeRepositoryPort,
)
from gated_auth.infrastructure.db.metadata import auth_codes


class SqlAlchemyAuthCodeRepository(AuthCodeRepositoryPort):
    """Auth code repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_code(self, payload: AuthCodeCreateInput) -> AuthCodeRecord:
        """Persist one code row and return the inserted record."""

        statement = sa.insert(auth_codes).values(
            user_id=payload.user_id,
            code=payload.code,
            ip_address=payload.ip_address,
            user_agent=payload.user_agent,
        ).returning(*auth_codes.c)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()

        row = result.mappings().one()
        return _to_auth_code_record(row)

    async def get_by_code(self, *, code: str) -> AuthCodeRecord | None:
        statement = sa.select(*auth_codes.c).where(auth_codes.c.code == code).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_auth_code_record(row)


def _to_auth_code_record(row: sa.RowMapping) -> AuthCodeRecord:
    return AuthCodeRecord(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        code=cast(str, row["code"]),
        ip_address=cast(str | None, row["ip_address"]),
        user_agent=cast(str | None, row["user_agent"]),
        created_at=cast(datetime, row["created_at"]),
    )
