"""Library configuration."""

from typing import List, Sequence, Tuple

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Seconds to wait before each retry; the length is the maximum retry count.
DEFAULT_BACKOFFS: Tuple[float, ...] = (0.1, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0)


def check_backoffs(backoffs: Sequence[float]) -> None:
    """Raise ValueError if any backoff delay is negative."""
    negative = [delay for delay in backoffs if delay < 0]
    if negative:
        raise ValueError(f"Backoff delays cannot be negative: {negative}")


class Settings(BaseSettings):
    """Library settings.

    All settings can be overridden with ``ATOMIC_`` prefixed environment
    variables, e.g. ``ATOMIC_BACKOFFS='[0.05, 0.5]'``.
    """

    # Service name reported with every metric
    PROJECT_NAME: str = "atomic"

    # Retry
    BACKOFFS: List[float] = list(DEFAULT_BACKOFFS)

    # Environment
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_CFG: str = ""
    SQL_ECHO: bool = False

    model_config = SettingsConfigDict(
        env_prefix="ATOMIC_",
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unrelated entries in a shared .env
    )

    @field_validator("BACKOFFS")
    @classmethod
    def validate_backoffs(cls, value: List[float]) -> List[float]:
        check_backoffs(value)
        return value


# Create global settings instance
settings = Settings()
