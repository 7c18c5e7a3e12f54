"""Centralized configuration via environment variables."""

from enum import StrEnum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from access_log.fields import DEFAULT_CUSTOM_FIELDS_KEY, DEFAULT_CUSTOM_LOGGER_KEY


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Settings loaded from environment variables (or a ``.env`` file).

    The access-log keys name the ``request.state`` attributes handlers use
    to pass extra fields and logger overrides to the middleware.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # --- Access log ---
    access_log_logger_name: str = "access"
    access_log_custom_fields_key: str = DEFAULT_CUSTOM_FIELDS_KEY
    access_log_custom_logger_key: str = DEFAULT_CUSTOM_LOGGER_KEY

    # --- Convenience properties ---
    @property
    def is_dev(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        from access_log.config import get_settings
        settings = get_settings()
    """
    return Settings()
