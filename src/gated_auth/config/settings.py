"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
SigningSecret = Annotated[str, Field(min_length=32)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    invite_key: NonEmptyStr = Field(validation_alias="INVITE_KEY")
    auth_token_secret: SigningSecret = Field(validation_alias="AUTH_TOKEN_SECRET")
    public_domain: NonEmptyStr = Field(validation_alias="PUBLIC_DOMAIN")
    deployment_mode: Literal["development", "production"] = Field(
        default="development",
        validation_alias="DEPLOYMENT_MODE",
    )
    score_override_enabled: bool = Field(
        default=False,
        validation_alias="SCORE_OVERRIDE_ENABLED",
    )
    landing_path: NonEmptyStr = Field(default="/inbox", validation_alias="LANDING_PATH")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def is_production(self) -> bool:
        return self.deployment_mode == "production"

    @model_validator(mode="after")
    def _reject_score_override_in_production(self) -> "Settings":
        if self.is_production and self.score_override_enabled:
            raise ValueError("SCORE_OVERRIDE_ENABLED cannot be set in production")
        return self


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
