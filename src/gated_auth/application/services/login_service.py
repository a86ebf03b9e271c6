"""Login protocol: verify credentials, issue a session token, redirect."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gated_auth.application.ports.auth_code_repository_port import AuthCodeCreateInput
from gated_auth.application.ports.password_hasher_port import PasswordHasherPort
from gated_auth.application.ports.token_issuer_port import BannedUserError, TokenIssuerPort
from gated_auth.application.ports.user_repository_port import UserRepositoryPort
from gated_auth.application.services.protocol_config import ProtocolConfig
from gated_auth.domain.auth.account import is_deleted_account_hash
from gated_auth.domain.auth.credentials import is_valid_username, normalize_username
from gated_auth.domain.auth.results import (
    GENERIC_FAILURE_MESSAGE,
    Failure,
    FailureKind,
    LoginResult,
    Redirect,
    SessionCookie,
)

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."
_BANNED_MESSAGE = "Your account is banned."


@dataclass(frozen=True)
class LoginRequest:
    """Submitted login form plus resolved client context."""

    username: str | None
    password: str | None
    ip_address: str | None = None
    user_agent: str | None = None


class LoginService:
    """Authenticate returning users and hand out session cookies."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        token_issuer: TokenIssuerPort,
        config: ProtocolConfig,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._token_issuer = token_issuer
        self._config = config

    async def login(self, request: LoginRequest) -> LoginResult:
        """Run the login protocol and return a redirect or a failure."""

        username = normalize_username(username=request.username) if request.username else None
        password = request.password

        if not username or not password:
            return Failure(FailureKind.INVALID_INPUT, "Invalid input.", username=username)

        if not is_valid_username(username):
            return Failure(
                FailureKind.INVALID_FORMAT,
                "Invalid username format.",
                username=username,
            )

        try:
            return await self._authenticate(
                username=username,
                password=password,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
            )
        except BannedUserError:
            logger.info("login_blocked_banned_by_issuer username=%s", username)
            return Failure(FailureKind.ACCOUNT_BANNED, _BANNED_MESSAGE, username=username)
        except Exception:
            logger.exception("login_unexpected_failure username=%s", username)
            return Failure(
                FailureKind.UNEXPECTED_FAILURE,
                GENERIC_FAILURE_MESSAGE,
                username=username,
            )

    async def _authenticate(
        self,
        *,
        username: str,
        password: str,
        ip_address: str | None,
        user_agent: str | None,
    ) -> LoginResult:
        user = await self._users.get_by_username(username=username)
        if user is None:
            logger.info("login_failed username=%s reason=unknown_user", username)
            return _invalid_credentials(username)

        if user.is_banned:
            logger.info("login_blocked_banned user_id=%s", user.user_id)
            return Failure(FailureKind.ACCOUNT_BANNED, _BANNED_MESSAGE, username=username)

        if is_deleted_account_hash(user.password_hash):
            logger.info("login_failed user_id=%s reason=deleted_account", user.user_id)
            return _invalid_credentials(username)

        is_valid = self._password_hasher.verify_password(
            password=password,
            password_hash=user.password_hash,
        )
        if not is_valid:
            logger.info("login_failed user_id=%s reason=wrong_password", user.user_id)
            return _invalid_credentials(username)

        issued = await self._token_issuer.issue(user_id=user.user_id)

        # The stored code is the durable half of the session; it must exist
        # before the client receives the token.
        await self._token_issuer.store_code(
            AuthCodeCreateInput(
                user_id=user.user_id,
                code=issued.code,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )

        logger.info("login_success user_id=%s ip=%s", user.user_id, ip_address)
        return Redirect(
            location=self._config.landing_path,
            cookie=SessionCookie(value=issued.token, secure=self._config.secure_cookies),
        )


def _invalid_credentials(username: str) -> Failure:
    return Failure(
        FailureKind.INVALID_CREDENTIALS,
        _INVALID_CREDENTIALS_MESSAGE,
        username=username,
    )
