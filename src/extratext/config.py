"""Library configuration using pydantic-settings.

Every setting can be overridden with an ``EXTRATEXT_``-prefixed environment
variable (e.g. ``EXTRATEXT_LOG_LEVEL=DEBUG``) or a ``.env`` file.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for node trees, logging and reconciliation."""

    model_config = SettingsConfigDict(
        env_prefix="EXTRATEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # Upper bound on optimize passes before giving up
    max_optimize_iterations: int = 100

    # Skip children the parent does not allow while building from a live tree
    lenient_build: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known value."""
        allowed = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {allowed}")
        return v_upper

    @field_validator("max_optimize_iterations")
    @classmethod
    def validate_max_optimize_iterations(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_optimize_iterations must be at least 1")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the process.
    """
    return Settings()
