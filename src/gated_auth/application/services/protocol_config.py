"""Immutable configuration shared by the login and signup protocols."""

from __future__ import annotations

from dataclasses import dataclass

from gated_auth.config.settings import Settings


@dataclass(frozen=True)
class ProtocolConfig:
    """Process-wide protocol settings, built once at startup."""

    invite_secret: str
    secure_cookies: bool
    domain: str
    allow_score_override: bool = False
    landing_path: str = "/inbox"

    @classmethod
    def from_settings(cls, settings: Settings) -> ProtocolConfig:
        return cls(
            invite_secret=settings.invite_key,
            secure_cookies=settings.is_production,
            domain=settings.public_domain,
            allow_score_override=settings.score_override_enabled,
            landing_path=settings.landing_path,
        )
