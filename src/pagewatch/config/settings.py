"""Pydantic settings models for configuration management."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from .types import ConfigError


class DatabaseSettings(BaseModel):
    """Database configuration settings."""

    url: str = "sqlite:///./data/pagewatch.db"
    echo: bool = False

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        if not v:
            raise ValueError("Database URL cannot be empty")
        return v


class SlackSettings(BaseModel):
    """Slack integration configuration."""

    bot_token: SecretStr = Field(default=SecretStr(""))
    app_token: SecretStr = Field(default=SecretStr(""))
    signing_secret: SecretStr = Field(default=SecretStr(""))
    channel: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token.get_secret_value() and self.channel)


class ScrapingSettings(BaseModel):
    """Page retrieval and rendering configuration."""

    request_timeout: float = 15.0  # seconds
    render_timeout: int = 10000  # milliseconds
    headless: bool = True
    user_agents: list[str] = Field(
        default_factory=lambda: [
            "Mozilla/5.0 (compatible; PageWatch/1.0)",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
        ]
    )

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v):
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v

    @field_validator("render_timeout")
    @classmethod
    def validate_render_timeout(cls, v):
        if v <= 0:
            raise ValueError("Render timeout must be positive")
        return v


class MonitorSettings(BaseModel):
    """Change monitoring, scheduling and notification policy configuration."""

    schedule_mode: str = "global"  # global or per_target
    default_interval_minutes: int = 15
    max_concurrent_checks: int = 5
    check_timeout_seconds: float = 60.0
    notify_timeout_seconds: float = 30.0
    realtime_cooldown_seconds: float = 60.0
    scheduled_cooldown_seconds: float = 60.0
    realtime_quiet_period: float = 2.0  # seconds
    realtime_min_text_length: int = 10
    preview_length: int = 200

    @field_validator("schedule_mode")
    @classmethod
    def validate_schedule_mode(cls, v):
        valid_modes = ["global", "per_target"]
        if v not in valid_modes:
            raise ValueError(f"Schedule mode must be one of: {valid_modes}")
        return v

    @field_validator("default_interval_minutes", "max_concurrent_checks")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("realtime_cooldown_seconds", "scheduled_cooldown_seconds")
    @classmethod
    def validate_cooldown(cls, v):
        if v < 0:
            raise ValueError("Cooldown cannot be negative")
        return v


class AppSettings(BaseSettings):
    """Main application settings."""

    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)
    scraping: ScrapingSettings = Field(default_factory=ScrapingSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)

    class Config:
        env_file = ".env"
        env_nested_delimiter = "__"
        case_sensitive = False
        extra = "allow"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


_settings: Optional[AppSettings] = None


@lru_cache
def get_settings() -> AppSettings:
    """Get the application settings instance."""
    global _settings

    if _settings is None:
        try:
            _settings = AppSettings()
        except Exception as e:
            raise ConfigError(f"Failed to load settings: {str(e)}") from e

    return _settings


def reload_settings() -> AppSettings:
    """Force reload of settings (useful for testing)."""
    global _settings
    _settings = None
    get_settings.cache_clear()
    return get_settings()


def ensure_database_directory(settings: DatabaseSettings) -> None:
    """Create the directory holding a file-backed SQLite database."""
    if not settings.url.startswith("sqlite") or ":///" not in settings.url:
        return

    db_path = settings.url.split(":///", 1)[1]
    if not db_path or db_path == ":memory:":
        return

    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        try:
            os.makedirs(db_dir, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Cannot create database directory: {str(e)}") from e
