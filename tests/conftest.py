"""Shared fixtures for the pagewatch test suite."""

from datetime import datetime
from typing import Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from pagewatch.config.settings import MonitorSettings
from pagewatch.notification.types import NotificationHandle, NotifierFailure
from pagewatch.scheduler.orchestrator import ChangeMonitor
from pagewatch.scraper.types import ExtractionFailure, ExtractionResult
from pagewatch.storage import InMemoryRegistry, TrackedTarget


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test to run with asyncio")


class RecordingNotifier:
    """Notifier fake that records every alert it is asked to deliver."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    async def notify(self, target: TrackedTarget, preview_text: str):
        if self.fail:
            raise NotifierFailure("delivery refused")
        self.sent.append((target.id, preview_text))
        return NotificationHandle(
            handle_id=f"n{len(self.sent)}", target_id=target.id, url=target.url
        )


class ScriptedChain:
    """Extraction chain fake returning canned text per URL."""

    def __init__(self, pages: Optional[dict[str, str]] = None):
        self.pages = pages or {}
        self.calls: list[str] = []

    async def extract(self, target: TrackedTarget) -> ExtractionResult:
        self.calls.append(target.id)
        text = self.pages.get(target.url)
        if text is None:
            raise ExtractionFailure(f"no content for {target.url}")
        return ExtractionResult(url=target.url, text=text, strategy="direct")


def make_target(target_id: str = "t1", url: str = "https://example.com/", **kwargs):
    return TrackedTarget(id=target_id, url=url, **kwargs)


@pytest.fixture
def base_time():
    return datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def monitor_settings():
    return MonitorSettings()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def chain():
    return ScriptedChain()


@pytest.fixture
def registry():
    return InMemoryRegistry([make_target()])


@pytest_asyncio.fixture
async def monitor(registry, chain, notifier, monitor_settings):
    change_monitor = ChangeMonitor(registry, chain, notifier, monitor_settings)
    yield change_monitor
    await change_monitor.cleanup()


@pytest.fixture
def mock_page():
    """Playwright page double with an owning browser context."""
    page = AsyncMock()
    page.is_closed = lambda: False
    page.set_default_timeout = lambda timeout: None
    page.set_default_navigation_timeout = lambda timeout: None
    page.context = AsyncMock()
    return page
