"""Tests for the command-line interface."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from conftest import RecordingNotifier, ScriptedChain, make_target
from pagewatch.cli.main import cli, normalize_url
from pagewatch.cli.types import CLIError
from pagewatch.scheduler import ChangeMonitor
from pagewatch.storage import InMemoryRegistry


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def registry():
    return InMemoryRegistry(
        [
            make_target("a1b2c3d4e5", "https://a.example/", name="Site A"),
            make_target("f6a7b8c9d0", "https://b.example/", name="Site B", active=False),
        ]
    )


@pytest.fixture
def patched_registry(registry):
    with patch("pagewatch.cli.main.get_registry", AsyncMock(return_value=registry)):
        yield registry


class TestNormalizeUrl:
    """Test URL validation for the add command."""

    def test_scheme_added_when_missing(self):
        assert normalize_url("example.com/page") == "https://example.com/page"

    def test_allowed_schemes_kept(self):
        assert normalize_url("http://example.com") == "http://example.com"
        assert normalize_url("file:///tmp/page.html") == "file:///tmp/page.html"

    def test_unsupported_scheme_rejected(self):
        with pytest.raises(CLIError):
            normalize_url("ftp://example.com")


class TestTargetCommands:
    """Test add/list/pause/resume/remove."""

    def test_add(self, runner, patched_registry):
        result = runner.invoke(
            cli, ["add", "example.com", "--selector", "#main", "--interval", "30"]
        )

        assert result.exit_code == 0, result.output
        assert "Tracking example.com" in result.output

        target = asyncio.run(patched_registry.find_by_url("https://example.com"))
        assert target.selector == "#main"
        assert target.interval == 30

    def test_add_duplicate_fails(self, runner, patched_registry):
        result = runner.invoke(cli, ["add", "https://a.example/"])

        assert result.exit_code == 1
        assert "already tracked" in result.output

    def test_add_bad_scheme_fails(self, runner, patched_registry):
        result = runner.invoke(cli, ["add", "ftp://example.com"])

        assert result.exit_code == 1
        assert "Unsupported URL scheme" in result.output

    def test_list_json(self, runner, patched_registry):
        result = runner.invoke(cli, ["list", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [item["name"] for item in data] == ["Site A", "Site B"]
        assert data[1]["status"] == "paused"

    def test_list_table_filters_status(self, runner, patched_registry):
        result = runner.invoke(cli, ["list", "--status", "paused"])

        assert result.exit_code == 0, result.output
        assert "Site B" in result.output
        assert "Site A" not in result.output

    def test_pause_and_resume_by_prefix(self, runner, patched_registry):
        result = runner.invoke(cli, ["pause", "a1b2"])
        assert result.exit_code == 0, result.output
        assert not asyncio.run(patched_registry.get_target("a1b2c3d4e5")).active

        result = runner.invoke(cli, ["resume", "a1b2"])
        assert result.exit_code == 0, result.output
        assert asyncio.run(patched_registry.get_target("a1b2c3d4e5")).active

    def test_unknown_target(self, runner, patched_registry):
        result = runner.invoke(cli, ["pause", "zzz"])

        assert result.exit_code == 1
        assert "Target not found" in result.output

    def test_remove_with_force(self, runner, patched_registry):
        result = runner.invoke(cli, ["remove", "f6a7", "--force"])

        assert result.exit_code == 0, result.output
        assert asyncio.run(patched_registry.get_target("f6a7b8c9d0")) is None

    def test_remove_cancelled_at_prompt(self, runner, patched_registry):
        result = runner.invoke(cli, ["remove", "f6a7"], input="n\n")

        assert result.exit_code == 0
        assert asyncio.run(patched_registry.get_target("f6a7b8c9d0")) is not None


class TestCheckCommand:
    """Test on-demand checks."""

    @pytest.fixture
    def monitor(self, patched_registry):
        chain = ScriptedChain({"https://a.example/": "Hello", "https://b.example/": "B"})
        change_monitor = ChangeMonitor(patched_registry, chain, RecordingNotifier())
        with patch(
            "pagewatch.cli.main.get_change_monitor",
            AsyncMock(return_value=change_monitor),
        ):
            yield change_monitor

    def test_check_single_target_even_when_paused(self, runner, monitor):
        result = runner.invoke(cli, ["check", "f6a7"])

        assert result.exit_code == 0, result.output
        assert "Checked 1 pages, 0 failed" in result.output

    def test_check_all_reports_failures(self, runner, monitor):
        monitor.chain.pages.pop("https://a.example/")

        result = runner.invoke(cli, ["check"])

        assert result.exit_code == 1
        assert "Checked 1 pages, 1 failed" in result.output


class TestImportCommand:
    """Test bulk registration from YAML."""

    def test_import_skips_known_urls(self, runner, patched_registry, tmp_path):
        config_file = tmp_path / "sites.yaml"
        config_file.write_text(
            """
global:
  default_interval: 45
sites:
  - url: https://a.example/
  - url: news.example.com
    selector: ".headline"
""",
            encoding="utf-8",
        )

        result = runner.invoke(cli, ["import", str(config_file)])

        assert result.exit_code == 0, result.output
        assert "Imported 1 pages (1 already tracked)" in result.output
        target = asyncio.run(patched_registry.find_by_url("https://news.example.com"))
        assert target.selector == ".headline"
        assert target.interval == 45
