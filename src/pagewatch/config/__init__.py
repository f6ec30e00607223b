"""Configuration management system for pagewatch."""

from .loader import ConfigLoader
from .settings import (
    AppSettings,
    DatabaseSettings,
    MonitorSettings,
    ScrapingSettings,
    SlackSettings,
    get_settings,
    reload_settings,
)
from .types import ConfigError, ConfigLoadError, GlobalConfiguration, SiteConfiguration

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "MonitorSettings",
    "ScrapingSettings",
    "SlackSettings",
    "get_settings",
    "reload_settings",
    "ConfigLoader",
    "ConfigError",
    "ConfigLoadError",
    "GlobalConfiguration",
    "SiteConfiguration",
]
