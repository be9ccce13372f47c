"""Configuration management for croncall."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Largest delay accepted by a single timer, in milliseconds (2^31 - 1).
DEFAULT_MAX_DELAY_MS = 2_147_483_647


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CRONCALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Timer settings
    max_delay_ms: int = Field(
        default=DEFAULT_MAX_DELAY_MS,
        gt=0,
        description="Longest single timer delay in milliseconds; longer waits are chained",
    )

    # Task settings
    active_by_default: bool = Field(
        default=True,
        description="Whether new cron tasks start armed when 'active' is not given",
    )

    def get_max_delay(self) -> float:
        """Get the timer ceiling in seconds.

        Returns:
            Maximum single delay in seconds.
        """
        return self.max_delay_ms / 1000


# Global settings instance
settings = Settings()
