"""web-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from gated_auth.application.services.login_service import LoginService
from gated_auth.application.services.protocol_config import ProtocolConfig
from gated_auth.application.services.signup_service import SignupService
from gated_auth.config.settings import Settings, load_settings
from gated_auth.infrastructure.db.auth_code_repository import SqlAlchemyAuthCodeRepository
from gated_auth.infrastructure.db.qualifying_session_repository import (
    SqlAlchemyQualifyingSessionRepository,
)
from gated_auth.infrastructure.db.session import create_session_factory
from gated_auth.infrastructure.db.user_repository import SqlAlchemyUserRepository
from gated_auth.infrastructure.http.auth_router import build_auth_router
from gated_auth.infrastructure.logging import configure_logging
from gated_auth.infrastructure.security.password_hasher import BcryptPasswordHasher
from gated_auth.infrastructure.security.token_issuer import JwtTokenIssuer

WEB_API_HOST = "0.0.0.0"
WEB_API_PORT = 8000
logger = logging.getLogger(__name__)


def build_login_service(
    database_url: str,
    *,
    token_secret: str,
    config: ProtocolConfig,
) -> LoginService:
    """Build login service with SQLAlchemy-backed dependencies."""

    session_factory = create_session_factory(database_url)
    users = SqlAlchemyUserRepository(session_factory)
    return LoginService(
        users=users,
        password_hasher=BcryptPasswordHasher(),
        token_issuer=JwtTokenIssuer(
            secret=token_secret,
            users=users,
            auth_codes=SqlAlchemyAuthCodeRepository(session_factory),
        ),
        config=config,
    )


def build_signup_service(database_url: str, *, config: ProtocolConfig) -> SignupService:
    """Build signup service with SQLAlchemy-backed dependencies."""

    session_factory = create_session_factory(database_url)
    return SignupService(
        users=SqlAlchemyUserRepository(session_factory),
        password_hasher=BcryptPasswordHasher(),
        session_scores=SqlAlchemyQualifyingSessionRepository(session_factory),
        config=config,
    )


def create_app(
    *,
    settings: Settings | None = None,
    login_service: LoginService | None = None,
    signup_service: SignupService | None = None,
) -> FastAPI:
    """Create FastAPI app exposing the login and signup protocols."""

    if login_service is None or signup_service is None:
        if settings is None:
            settings = load_settings()
        config = ProtocolConfig.from_settings(settings)
        if login_service is None:
            login_service = build_login_service(
                settings.database_url,
                token_secret=settings.auth_token_secret,
                config=config,
            )
        if signup_service is None:
            signup_service = build_signup_service(settings.database_url, config=config)
    if settings is not None:
        configure_logging(level=settings.log_level)
        logger.info(
            "web_api_configured deployment_mode=%s score_override_enabled=%s",
            settings.deployment_mode,
            settings.score_override_enabled,
        )

    app = FastAPI()
    app.include_router(
        build_auth_router(
            login_service=login_service,
            signup_service=signup_service,
        )
    )
    return app


def run_asgi_server(*, host: str = WEB_API_HOST, port: int = WEB_API_PORT) -> None:
    """Run web-api as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.web_api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run web-api runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
