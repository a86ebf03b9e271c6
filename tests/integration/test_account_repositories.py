from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.config import Config

from alembic import command
from gated_auth.application.ports.auth_code_repository_port import AuthCodeCreateInput
from gated_auth.application.ports.user_repository_port import UserCreateInput, UsernameTakenError
from gated_auth.infrastructure.db.auth_code_repository import SqlAlchemyAuthCodeRepository
from gated_auth.infrastructure.db.qualifying_session_repository import (
    SqlAlchemyQualifyingSessionRepository,
)
from gated_auth.infrastructure.db.session import create_session_factory
from gated_auth.infrastructure.db.user_repository import SqlAlchemyUserRepository


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _user_input(username: str = "alice") -> UserCreateInput:
    return UserCreateInput(
        username=username,
        password_hash="hash",
        domain="example.org",
        score=120,
    )


@pytest.mark.asyncio
async def test_create_and_lookup_user(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_users.db")
    repository = SqlAlchemyUserRepository(create_session_factory(async_url))

    created = await repository.create_user(_user_input())
    by_username = await repository.get_by_username(username="alice")
    by_id = await repository.get_by_id(user_id=created.user_id)

    assert created.username == "alice"
    assert created.score == 120
    assert created.is_banned is False
    assert by_username == created
    assert by_id == created
    assert await repository.get_by_username(username="missing") is None


@pytest.mark.asyncio
async def test_unique_constraint_surfaces_as_username_taken(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_unique.db")
    repository = SqlAlchemyUserRepository(create_session_factory(async_url))
    await repository.create_user(_user_input())

    with pytest.raises(UsernameTakenError):
        await repository.create_user(_user_input())


@pytest.mark.asyncio
async def test_concurrent_inserts_with_same_username_allow_one_row(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "repo_race.db")
    repository = SqlAlchemyUserRepository(create_session_factory(async_url))

    results = await asyncio.gather(
        repository.create_user(_user_input()),
        repository.create_user(_user_input()),
        return_exceptions=True,
    )

    errors = [result for result in results if isinstance(result, BaseException)]
    assert len(errors) == 1
    assert isinstance(errors[0], UsernameTakenError)
    with sa.create_engine(sync_url).begin() as connection:
        count = connection.execute(sa.text("SELECT COUNT(*) FROM users")).scalar_one()
    assert int(count) == 1


@pytest.mark.asyncio
async def test_delete_user_reports_existence(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_delete_user.db")
    repository = SqlAlchemyUserRepository(create_session_factory(async_url))
    created = await repository.create_user(_user_input())

    assert await repository.delete_user(user_id=created.user_id) is True
    assert await repository.delete_user(user_id=created.user_id) is False
    assert await repository.get_by_id(user_id=created.user_id) is None


@pytest.mark.asyncio
async def test_auth_code_round_trip_keeps_client_context(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_codes.db")
    session_factory = create_session_factory(async_url)
    user = await SqlAlchemyUserRepository(session_factory).create_user(_user_input())
    repository = SqlAlchemyAuthCodeRepository(session_factory)

    created = await repository.create_code(
        AuthCodeCreateInput(
            user_id=user.user_id,
            code="one-time-code",
            ip_address="203.0.113.9",
            user_agent=None,
        )
    )
    loaded = await repository.get_by_code(code="one-time-code")

    assert loaded == created
    assert created.user_id == user.user_id
    assert created.ip_address == "203.0.113.9"
    assert created.user_agent is None
    assert await repository.get_by_code(code="unknown") is None


@pytest.mark.asyncio
async def test_session_delete_is_one_time(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "repo_sessions.db")
    with sa.create_engine(sync_url).begin() as connection:
        connection.execute(
            sa.text(
                "INSERT INTO qualifying_sessions (session_id, score) "
                "VALUES ('session-1', 120), ('session-2', NULL)"
            )
        )
    repository = SqlAlchemyQualifyingSessionRepository(create_session_factory(async_url))

    assert await repository.get_score(session_id="session-1") == 120
    assert await repository.get_score(session_id="session-2") is None
    assert await repository.get_score(session_id="missing") is None

    first, second = await asyncio.gather(
        repository.delete_session(session_id="session-1"),
        repository.delete_session(session_id="session-1"),
    )

    assert sorted([first, second]) == [False, True]
    assert await repository.get_score(session_id="session-1") is None
