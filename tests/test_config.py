"""Tests for settings and the YAML site loader."""

import pytest

from pagewatch.config import (
    AppSettings,
    ConfigLoader,
    ConfigLoadError,
    SiteConfiguration,
    reload_settings,
)
from pagewatch.config.settings import ScrapingSettings, SlackSettings


class TestAppSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        settings = AppSettings(_env_file=None)

        assert settings.monitor.schedule_mode == "global"
        assert settings.monitor.default_interval_minutes == 15
        assert settings.monitor.realtime_cooldown_seconds == 60
        assert settings.monitor.preview_length == 200
        assert settings.scraping.render_timeout == 10000
        assert not settings.slack.enabled

    def test_nested_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MONITOR__DEFAULT_INTERVAL_MINUTES", "30")
        monkeypatch.setenv("MONITOR__SCHEDULE_MODE", "per_target")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = AppSettings(_env_file=None)

        assert settings.monitor.default_interval_minutes == 30
        assert settings.monitor.schedule_mode == "per_target"
        assert settings.log_level == "DEBUG"

    def test_reload_settings_picks_up_environment(self, monkeypatch):
        monkeypatch.setenv("MONITOR__PREVIEW_LENGTH", "50")
        try:
            assert reload_settings().monitor.preview_length == 50
        finally:
            monkeypatch.delenv("MONITOR__PREVIEW_LENGTH")
            reload_settings()

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(_env_file=None, log_level="LOUD")

    def test_slack_enabled_needs_token_and_channel(self):
        assert not SlackSettings(bot_token="xoxb-1").enabled
        assert SlackSettings(bot_token="xoxb-1", channel="#alerts").enabled

    def test_scraping_timeouts_validated(self):
        with pytest.raises(ValueError):
            ScrapingSettings(request_timeout=0)


class TestConfigLoader:
    """Test YAML site list loading."""

    def test_loads_global_and_sites(self, tmp_path):
        config_file = tmp_path / "sites.yaml"
        config_file.write_text(
            """
global:
  default_interval: 30
sites:
  - url: https://example.com/pricing
    name: Pricing
    selector: "#plans"
    interval: 60
  - url: https://example.org/
    active: false
  - name: missing url
""",
            encoding="utf-8",
        )

        loader = ConfigLoader(config_file)
        sites = loader.get_sites_config()

        assert loader.get_global_config().default_interval == 30
        assert [site.url for site in sites] == [
            "https://example.com/pricing",
            "https://example.org/",
        ]
        assert sites[0].selector == "#plans"
        assert sites[0].interval == 60
        assert not sites[1].active

    def test_missing_file_yields_empty_config(self, tmp_path):
        loader = ConfigLoader(tmp_path / "absent.yaml")
        assert loader.get_sites_config() == []
        assert loader.get_global_config().default_interval is None

    def test_malformed_yaml_raises(self, tmp_path):
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("sites: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigLoadError):
            ConfigLoader(config_file).load_yaml_config()

    def test_non_mapping_rejected(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError):
            ConfigLoader(config_file).load_yaml_config()

    def test_site_configuration_round_trip_fields(self):
        site = SiteConfiguration.from_dict({"url": "https://a.example/", "selector": ""})
        assert site.selector is None
        assert site.to_dict()["url"] == "https://a.example/"
