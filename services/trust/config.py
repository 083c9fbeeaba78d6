"""
Trust configuration definition.

Loads signing secrets and token lifetimes from environment variables.
Uses pydantic-settings for type safety and defaults.
"""

from typing import List

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.exceptions import ConfigurationError

DEV_ACCESS_TOKEN_SECRET = "dev-access-token-secret"
DEV_RUN_JOIN_TOKEN_SECRET = "dev-run-join-token-secret"


class TrustConfig(BaseSettings):
    """
    Secrets and lifetimes shared by services that issue or check tokens and events.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    ENVIRONMENT: str = Field(default="development", description="Deployment environment")

    # Access tokens (API)
    AUTH_ACCESS_TOKEN_SECRET: SecretStr = Field(
        default=SecretStr(DEV_ACCESS_TOKEN_SECRET), description="Access token signing secret"
    )
    AUTH_ACCESS_TOKEN_EXPIRES_SECONDS: int = Field(
        default=900, gt=0, description="Access token lifetime (seconds)"
    )

    # Run join tokens (API -> game server)
    RUN_JOIN_TOKEN_SECRET: SecretStr = Field(
        default=SecretStr(DEV_RUN_JOIN_TOKEN_SECRET), description="Join token signing secret"
    )
    RUN_JOIN_TOKEN_EXPIRES_SECONDS: int = Field(
        default=120, gt=0, description="Join token lifetime (seconds)"
    )

    # Run event callbacks (game server -> API)
    GAME_SERVER_WEBHOOK_KEY: SecretStr = Field(
        default=SecretStr(""), description="Shared secret for run event signatures"
    )
    RUN_EVENTS_SIGNATURE_REQUIRED: bool = Field(
        default=True, description="Whether inbound run events must be signed"
    )
    RUN_EVENTS_SIGNATURE_MAX_AGE_SECONDS: int = Field(
        default=300, gt=0, description="Accepted clock skew for event timestamps (seconds)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

    def insecure_secrets(self) -> List[str]:
        """Names of secrets that are empty or still at their development default."""
        missing = []
        access = self.AUTH_ACCESS_TOKEN_SECRET.get_secret_value()
        if not access or access == DEV_ACCESS_TOKEN_SECRET:
            missing.append("AUTH_ACCESS_TOKEN_SECRET")
        join = self.RUN_JOIN_TOKEN_SECRET.get_secret_value()
        if not join or join == DEV_RUN_JOIN_TOKEN_SECRET:
            missing.append("RUN_JOIN_TOKEN_SECRET")
        if not self.GAME_SERVER_WEBHOOK_KEY.get_secret_value():
            missing.append("GAME_SERVER_WEBHOOK_KEY")
        return missing

    def assert_production_secrets(self) -> None:
        """
        Refuse to run in production with development or empty secrets.

        Raises:
            ConfigurationError: listing every offending variable
        """
        if not self.is_production:
            return
        missing = self.insecure_secrets()
        if missing:
            raise ConfigurationError(
                f"Missing required production security config: {', '.join(missing)}"
            )
