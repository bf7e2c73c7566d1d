"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from MARKERTIME_* environment variables.

    Attributes:
        log_level: Minimum level emitted by structlog ("DEBUG", "INFO", ...)
        json_logs: Render log lines as JSON instead of the console format
        parse_cache: Reuse the last parse result when the same text is
            parsed again by the same expression
    """

    log_level: str = "INFO"
    json_logs: bool = False
    parse_cache: bool = True

    model_config = SettingsConfigDict(
        env_prefix="MARKERTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment

    Note:
        Settings are cached for performance. Use get_settings.cache_clear()
        to reload settings in tests.
    """
    return Settings()
