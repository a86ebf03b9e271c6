"""Shared normalization and format rules for account credentials."""

from __future__ import annotations

import re

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
_USERNAME_RE = re.compile(r"^[a-z0-9_]+$")


def normalize_username(*, username: str) -> str:
    """Normalize one username for storage and lookup."""

    return username.strip().lower()


def is_valid_username(username: str) -> bool:
    """Return whether username matches the shared account name format.

    The rule is case-insensitive: callers may pass the raw form value or the
    normalized one and get the same answer.
    """

    candidate = username.lower()
    if not USERNAME_MIN_LENGTH <= len(candidate) <= USERNAME_MAX_LENGTH:
        return False
    return _USERNAME_RE.fullmatch(candidate) is not None
