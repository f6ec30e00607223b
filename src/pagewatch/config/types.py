"""Type definitions for configuration system."""

from typing import Any, Optional


class ConfigError(Exception):
    """Base exception for configuration-related errors."""

    pass


class ConfigLoadError(ConfigError):
    """Exception raised when configuration loading fails."""

    pass


class SiteConfiguration:
    """Configuration for a monitored site."""

    def __init__(
        self,
        url: str,
        name: Optional[str] = None,
        selector: Optional[str] = None,
        interval: Optional[int] = None,
        active: bool = True,
    ):
        self.url = url
        self.name = name
        self.selector = selector or None
        self.interval = interval
        self.active = active

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteConfiguration":
        """Create from dictionary configuration."""
        interval = data.get("interval")
        return cls(
            url=data["url"],
            name=data.get("name"),
            selector=data.get("selector"),
            interval=int(interval) if interval is not None else None,
            active=data.get("active", True),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "url": self.url,
            "name": self.name,
            "selector": self.selector,
            "interval": self.interval,
            "active": self.active,
        }


class GlobalConfiguration:
    """Global monitoring configuration from the YAML file."""

    def __init__(self, default_interval: Optional[int] = None):
        self.default_interval = default_interval

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlobalConfiguration":
        """Create from dictionary configuration."""
        interval = data.get("default_interval")
        return cls(default_interval=int(interval) if interval is not None else None)
