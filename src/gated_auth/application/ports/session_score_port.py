"""Port for qualifying-test session scores."""

from __future__ import annotations

from typing import Protocol


class SessionScorePort(Protocol):
    """Qualifying session lookup and one-time consumption contract."""

    async def get_score(self, *, session_id: str) -> int | None:
        """Return the session score, or None when missing or incomplete."""

    async def delete_session(self, *, session_id: str) -> bool:
        """Atomically delete one session; return False when it was already gone."""
