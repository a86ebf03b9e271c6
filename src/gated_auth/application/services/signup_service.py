"""Signup protocol: invite and qualifying-score eligibility, then account creation."""

from __future__ import annotations

import hmac
import logging
import re
from dataclasses import dataclass
from enum import StrEnum

from gated_auth.application.ports.password_hasher_port import PasswordHasherPort
from gated_auth.application.ports.session_score_port import SessionScorePort
from gated_auth.application.ports.user_repository_port import (
    UserCreateInput,
    UsernameTakenError,
    UserRepositoryPort,
)
from gated_auth.application.services.protocol_config import ProtocolConfig
from gated_auth.domain.auth.account import PASSWORD_MAX_BYTES, SIGNUP_PASSWORD_MIN_LENGTH
from gated_auth.domain.auth.credentials import is_valid_username, normalize_username
from gated_auth.domain.auth.results import (
    GENERIC_FAILURE_MESSAGE,
    Failure,
    FailureKind,
    SignupResult,
    SignupSuccess,
)

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"-?[0-9]+", re.ASCII)


class SignupStage(StrEnum):
    """Progress markers for one signup request."""

    COLLECTING = "collecting"
    VALIDATING_INVITE = "validating_invite"
    RESOLVING_SCORE = "resolving_score"
    CHECKING_UNIQUENESS = "checking_uniqueness"
    PERSISTING = "persisting"
    CONSUMING_SESSION = "consuming_session"
    DONE = "done"


@dataclass(frozen=True)
class SignupRequest:
    """Submitted signup form fields, all optional as received."""

    username: str | None = None
    password: str | None = None
    confirm_password: str | None = None
    invite_key: str | None = None
    iq_override: str | None = None
    session_id: str | None = None
    client_score: str | None = None


@dataclass(frozen=True)
class _ResolvedScore:
    score: int
    session_id: str | None


class SignupService:
    """Enroll new users behind an invite secret and a verified qualifying score."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        session_scores: SessionScorePort,
        config: ProtocolConfig,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher
        self._session_scores = session_scores
        self._config = config

    async def signup(self, request: SignupRequest) -> SignupResult:
        """Run the signup protocol and return success or a terminal failure."""

        username = normalize_username(username=request.username) if request.username else None
        logger.info(
            "signup_received username=%s password=%s confirm_password=%s "
            "invite_key=%s iq_override=%s session_id=%s client_score=%s",
            username,
            bool(request.password),
            bool(request.confirm_password),
            bool(request.invite_key),
            bool(request.iq_override),
            request.session_id,
            request.client_score,
        )
        try:
            return await self._signup(request, username=username)
        except Exception:
            logger.exception("signup_unexpected_failure username=%s", username)
            return Failure(
                FailureKind.UNEXPECTED_FAILURE,
                GENERIC_FAILURE_MESSAGE,
                username=username,
            )

    async def _signup(self, request: SignupRequest, *, username: str | None) -> SignupResult:
        _log_stage(SignupStage.COLLECTING, username)
        override = self._accepted_override(request.iq_override, username=username)

        if not username:
            return Failure(FailureKind.INVALID_INPUT, "Username is required")
        if not is_valid_username(username):
            return _fail(FailureKind.INVALID_FORMAT, "Invalid username format", username)
        if not request.password:
            return _fail(FailureKind.INVALID_INPUT, "Password is required", username)
        if not request.confirm_password:
            return _fail(
                FailureKind.INVALID_INPUT,
                "Password confirmation is required",
                username,
            )
        if not request.invite_key:
            return _fail(FailureKind.INVALID_INPUT, "An invite key is required.", username)
        if override is None:
            if not request.session_id:
                return _fail(
                    FailureKind.INVALID_INPUT,
                    "IQ test session ID is missing",
                    username,
                )
            if not request.client_score:
                return _fail(FailureKind.INVALID_INPUT, "IQ score is missing", username)

        if len(request.password) < SIGNUP_PASSWORD_MIN_LENGTH:
            return _fail(
                FailureKind.INVALID_INPUT,
                f"Password must be at least {SIGNUP_PASSWORD_MIN_LENGTH} characters",
                username,
            )
        if len(request.password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            return _fail(
                FailureKind.INVALID_INPUT,
                f"Password must be at most {PASSWORD_MAX_BYTES} bytes",
                username,
            )
        if request.password != request.confirm_password:
            return _fail(FailureKind.PASSWORD_MISMATCH, "Passwords do not match", username)

        _log_stage(SignupStage.VALIDATING_INVITE, username)
        if not hmac.compare_digest(
            request.invite_key.encode("utf-8"),
            self._config.invite_secret.encode("utf-8"),
        ):
            return _fail(FailureKind.INVALID_INVITE, "Invalid invite key", username)

        _log_stage(SignupStage.RESOLVING_SCORE, username)
        if override is not None:
            resolved = _parse_override(override)
        else:
            assert request.session_id is not None
            assert request.client_score is not None
            resolved = await self._resolve_verified_score(
                session_id=request.session_id,
                client_score=request.client_score,
            )
        if isinstance(resolved, Failure):
            return _fail(resolved.kind, resolved.message, username)

        _log_stage(SignupStage.CHECKING_UNIQUENESS, username)
        if await self._users.get_by_username(username=username) is not None:
            return _username_taken(username)

        _log_stage(SignupStage.PERSISTING, username)
        password_hash = self._password_hasher.hash_password(request.password)
        try:
            user = await self._users.create_user(
                UserCreateInput(
                    username=username,
                    password_hash=password_hash,
                    domain=self._config.domain,
                    score=resolved.score,
                )
            )
        except UsernameTakenError:
            logger.info("signup_username_conflict_on_insert username=%s", username)
            return _username_taken(username)

        if resolved.session_id is not None:
            _log_stage(SignupStage.CONSUMING_SESSION, username)
            consumed = await self._consume_session(
                session_id=resolved.session_id,
                user_id=user.user_id,
            )
            if not consumed:
                # A concurrent signup consumed the same session first.
                await self._users.delete_user(user_id=user.user_id)
                return _fail(
                    FailureKind.SESSION_NOT_FOUND,
                    "IQ test session not found or incomplete",
                    username,
                )

        _log_stage(SignupStage.DONE, username)
        logger.info("signup_success user_id=%s score=%s", user.user_id, resolved.score)
        return SignupSuccess(user_id=user.user_id, username=user.username)

    def _accepted_override(self, raw_override: str | None, *, username: str | None) -> str | None:
        """Return the override value when present and permitted by deployment policy."""

        if raw_override is None or not raw_override.strip():
            return None
        if not self._config.allow_score_override:
            logger.warning("signup_score_override_ignored username=%s", username)
            return None
        return raw_override.strip()

    async def _resolve_verified_score(
        self,
        *,
        session_id: str,
        client_score: str,
    ) -> _ResolvedScore | Failure:
        """Bind the client-declared score to the server-held session score."""

        declared = _parse_int(client_score)
        if declared is None:
            return Failure(FailureKind.INVALID_SCORE_FORMAT, "Invalid IQ score format")

        server_score = await self._session_scores.get_score(session_id=session_id)
        if server_score is None:
            return Failure(
                FailureKind.SESSION_NOT_FOUND,
                "IQ test session not found or incomplete",
            )

        if server_score != declared:
            logger.warning(
                "signup_score_mismatch session_id=%s declared=%s stored=%s",
                session_id,
                declared,
                server_score,
            )
            return Failure(FailureKind.SCORE_MISMATCH, "IQ score validation failed")

        return _ResolvedScore(score=server_score, session_id=session_id)

    async def _consume_session(self, *, session_id: str, user_id: int) -> bool:
        """Delete the qualifying session and report whether this request consumed it.

        A failing delete is logged and treated as consumed so the created account
        is kept. A delete that finds no row means another request won the session.
        """

        try:
            deleted = await self._session_scores.delete_session(session_id=session_id)
        except Exception:
            logger.exception(
                "signup_session_delete_failed session_id=%s user_id=%s",
                session_id,
                user_id,
            )
            return True
        if not deleted:
            logger.warning(
                "signup_session_already_consumed session_id=%s user_id=%s",
                session_id,
                user_id,
            )
        return deleted


def _parse_override(raw_override: str) -> _ResolvedScore | Failure:
    score = _parse_int(raw_override)
    if score is None:
        return Failure(FailureKind.INVALID_SCORE_FORMAT, "Invalid IQ score format")
    return _ResolvedScore(score=score, session_id=None)


def _parse_int(raw_value: str) -> int | None:
    candidate = raw_value.strip()
    if _INTEGER_RE.fullmatch(candidate) is None:
        return None
    return int(candidate, 10)


def _fail(kind: FailureKind, message: str, username: str) -> Failure:
    return Failure(kind, message, username=username)


def _username_taken(username: str) -> Failure:
    return Failure(FailureKind.USERNAME_TAKEN, "Username already taken", username=username)


def _log_stage(stage: SignupStage, username: str | None) -> None:
    logger.debug("signup_stage stage=%s username=%s", stage.value, username)
