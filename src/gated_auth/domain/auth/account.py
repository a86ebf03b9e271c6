"""Account lifecycle constants shared by login and signup."""

from __future__ import annotations

# Stored in place of a real hash once an account is permanently deactivated.
DELETED_ACCOUNT_PASSWORD_HASH = "DELETED_ACCOUNT"

SIGNUP_PASSWORD_MIN_LENGTH = 8
# bcrypt only accepts this many bytes of input.
PASSWORD_MAX_BYTES = 72
PASSWORD_HASH_ROUNDS = 10


def is_deleted_account_hash(password_hash: str) -> bool:
    """Return whether a stored hash marks a deactivated account."""

    return password_hash == DELETED_ACCOUNT_PASSWORD_HASH
