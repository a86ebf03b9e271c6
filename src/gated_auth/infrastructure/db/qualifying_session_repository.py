"""SQLAlchemy adapter for qualifying-test session scores."""

from __future__ import annotations

from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gated_auth.application.ports.session_score_port import SessionScorePort
from gated_auth.infrastructure.db.metadata import qualifying_sessions


class SqlAlchemyQualifyingSessionRepository(SessionScorePort):
    """Session score store backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_score(self, *, session_id: str) -> int | None:
        """Return stored score, or None for a missing or not yet scored session."""

        statement = (
            sa.select(qualifying_sessions.c.score)
            .where(qualifying_sessions.c.session_id == session_id)
            .limit(1)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        score = result.scalar_one_or_none()
        if score is None:
            return None
        return int(score)

    async def delete_session(self, *, session_id: str) -> bool:
        """Delete one session row in a single statement; False if already gone."""

        statement = sa.delete(qualifying_sessions).where(
            qualifying_sessions.c.session_id == session_id
        )

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0) > 0
