"""
Configuration management for sejm-sync.

Settings are loaded from environment variables, an optional .env file,
and defaults, one settings class per concern.

Responsibility: Centralized configuration for API, store, cache and app
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiConfig(BaseSettings):
    """Upstream API and transport configuration"""

    base_url: str = Field(default="https://api.sejm.gov.pl")
    user_agent: str = Field(default="sejm-sync/1.0")
    senate_catalog_url: str = Field(
        default="https://www.senat.gov.pl/gfx/senat/glosowania_wyniki/senat.xml"
    )

    # Transport behaviour
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=0.5, ge=0)
    max_delay_seconds: float = Field(default=30.0, ge=0)
    rate_limit_cooldown_seconds: float = Field(default=5.0, ge=0)
    max_rate_limit_waits: int = Field(default=10, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="API_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are joined with a leading slash"""
        return v.rstrip("/")


class DatabaseConfig(BaseSettings):
    """SQLite store configuration"""

    path: str = Field(default="data/sejm_sync.db")
    echo: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def connection_string(self) -> str:
        """
        Build the async SQLAlchemy connection string.

        Returns:
            SQLAlchemy URL using the aiosqlite driver
        """
        if self.path == ":memory:":
            return "sqlite+aiosqlite:///:memory:"
        return f"sqlite+aiosqlite:///{self.path}"


class CacheConfig(BaseSettings):
    """Freshness windows for slowly-changing resources"""

    members_ttl_days: float = Field(default=7.0, ge=0)
    sitting_list_ttl_hours: float = Field(default=24.0, ge=0)
    term_module_ttl_hours: float = Field(default=24.0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        case_sensitive=False,
        extra="ignore"
    )


class AppConfig(BaseSettings):
    """Application configuration"""

    app_name: str = Field(default="sejm-sync")

    # Logging
    log_level: str = Field(default="INFO")

    # Defaults for sync runs
    default_term: int = Field(default=10, ge=1)
    default_speed: str = Field(default="normal")
    privacy_filter: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Global settings container.

    Loads configuration from:
    1. Environment variables
    2. .env file
    3. Default values

    Example:
        settings = Settings()
        settings = Settings(db=DatabaseConfig(path="/tmp/test.db"))
    """

    app: AppConfig = Field(default_factory=AppConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @classmethod
    def for_tests(cls, db_path: Optional[str] = None) -> "Settings":
        """
        Create settings with no retry delays, for fast deterministic runs.
        """
        return cls(
            api=ApiConfig(
                base_url="https://api.test",
                base_delay_seconds=0.0,
                rate_limit_cooldown_seconds=0.0,
            ),
            db=DatabaseConfig(path=db_path or ":memory:"),
        )


# Global settings instance
settings = Settings()
