"""Discriminated outcomes returned by the login and signup protocols."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

SESSION_COOKIE_NAME = "auth_token"
SESSION_COOKIE_MAX_AGE_SECONDS = 60 * 60 * 24 * 7
GENERIC_FAILURE_MESSAGE = "Internal server error. Please try again later."


class FailureKind(StrEnum):
    """Failure taxonomy shared by both protocols."""

    INVALID_INPUT = "invalid_input"
    INVALID_FORMAT = "invalid_format"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_BANNED = "account_banned"
    PASSWORD_MISMATCH = "password_mismatch"
    INVALID_INVITE = "invalid_invite"
    INVALID_SCORE_FORMAT = "invalid_score_format"
    SESSION_NOT_FOUND = "session_not_found"
    SCORE_MISMATCH = "score_mismatch"
    USERNAME_TAKEN = "username_taken"
    UNEXPECTED_FAILURE = "unexpected_failure"


_STATUS_BY_KIND: dict[FailureKind, int] = {
    FailureKind.ACCOUNT_BANNED: 403,
    FailureKind.USERNAME_TAKEN: 409,
    FailureKind.UNEXPECTED_FAILURE: 500,
}


@dataclass(frozen=True)
class Failure:
    """Terminal rejection for one request."""

    kind: FailureKind
    message: str
    username: str | None = None

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND.get(self.kind, 400)

    def to_payload(self) -> dict[str, object]:
        """Return response body used to repopulate the submitted form."""

        payload: dict[str, object] = {"success": False, "error": self.message}
        if self.username is not None:
            payload["username"] = self.username
        return payload


@dataclass(frozen=True)
class SessionCookie:
    """Session cookie carrying a signed auth token."""

    value: str
    secure: bool
    name: str = SESSION_COOKIE_NAME
    path: str = "/"
    http_only: bool = True
    same_site: Literal["strict"] = "strict"
    max_age: int = SESSION_COOKIE_MAX_AGE_SECONDS


@dataclass(frozen=True)
class Redirect:
    """Successful login outcome: send the client to an authenticated page."""

    location: str
    cookie: SessionCookie | None = None


@dataclass(frozen=True)
class SignupSuccess:
    """Successful account creation outcome."""

    user_id: int
    username: str

    def to_payload(self) -> dict[str, object]:
        return {"success": True}


LoginResult = Redirect | Failure
SignupResult = SignupSuccess | Failure
