"""Configuration loading from YAML site lists."""

from pathlib import Path
from typing import Any, Optional

import yaml

from ..utils.logging import get_structured_logger
from .types import ConfigLoadError, GlobalConfiguration, SiteConfiguration

logger = get_structured_logger(__name__)


class ConfigLoader:
    """Loads the ``global`` and ``sites`` sections of a YAML config file.

    Example file::

        global:
          default_interval: 30
        sites:
          - url: https://example.com/pricing
            selector: "#plans"
            interval: 60
    """

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else Path("config.yaml")
        self._cache: Optional[dict[str, Any]] = None

    def load_yaml_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if self._cache is not None:
            return self._cache

        if not self.config_file.exists():
            logger.warning("Config file not found, using defaults", path=str(self.config_file))
            return {}

        try:
            with open(self.config_file, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML config: {str(e)}") from e
        except OSError as e:
            raise ConfigLoadError(f"Failed to load config file: {str(e)}") from e

        if not isinstance(config, dict):
            raise ConfigLoadError("Config file must contain a mapping at the top level")

        logger.info("Loaded configuration", path=str(self.config_file))
        self._cache = config
        return config

    def get_global_config(self) -> GlobalConfiguration:
        """Get global configuration."""
        config = self.load_yaml_config()
        return GlobalConfiguration.from_dict(config.get("global") or {})

    def get_sites_config(self) -> list[SiteConfiguration]:
        """Get sites configuration, skipping malformed entries."""
        config = self.load_yaml_config()
        sites_data = config.get("sites") or []

        sites = []
        for site_data in sites_data:
            try:
                sites.append(SiteConfiguration.from_dict(site_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.error("Failed to parse site config", site=site_data, error=str(e))

        return sites
