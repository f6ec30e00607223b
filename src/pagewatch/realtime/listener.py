"""Push-driven change detection for pages kept open in the browser."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config.settings import MonitorSettings, ScrapingSettings
from ..scraper.browser import ManagedBrowser, RenderContextProvider
from ..storage.interface import TargetRegistry
from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .types import ChangeSignal, MutationBatch

logger = get_structured_logger(__name__)

SignalHandler = Callable[[ChangeSignal], Awaitable[object]]

BINDING_NAME = "__pagewatchMutations"

OBSERVER_SCRIPT = """
(() => {
  const start = () => {
    if (window.__pagewatchObserver || !document.body) return;
    const observer = new MutationObserver((mutations) => {
      const lengths = [];
      for (const mutation of mutations) {
        if (mutation.type !== 'childList') continue;
        for (const node of mutation.addedNodes) {
          if (node.nodeType === Node.ELEMENT_NODE) {
            lengths.push((node.textContent || '').trim().length);
          }
        }
      }
      if (lengths.length > 0) {
        window.__pagewatchMutations(lengths);
      }
    });
    observer.observe(document.body, {childList: true, subtree: true});
    window.__pagewatchObserver = observer;
  };
  if (document.body) {
    start();
  } else {
    document.addEventListener('DOMContentLoaded', start);
  }
})()
"""


class Debouncer:
    """Runs ``callback`` once no trigger has arrived for ``quiet_period`` seconds."""

    def __init__(self, quiet_period: float, callback: Callable[[], Awaitable[None]]):
        self.quiet_period = quiet_period
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        self.cancel()
        self._task = asyncio.ensure_future(self._fire())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _fire(self) -> None:
        await asyncio.sleep(self.quiet_period)
        try:
            await self.callback()
        except Exception as e:
            logger.error("Debounced callback failed", error=str(e))


class RealtimeChangeListener:
    """Observes DOM insertions in one page and emits debounced change signals."""

    def __init__(
        self,
        page: Page,
        url: str,
        on_signal: SignalHandler,
        min_text_length: int = 10,
        quiet_period: float = 2.0,
    ):
        self.page = page
        self.url = url
        self.on_signal = on_signal
        self.min_text_length = min_text_length
        self.debouncer = Debouncer(quiet_period, self._emit)

    async def attach(self) -> None:
        """Install the observer for the current and every later document."""
        await self.page.expose_binding(BINDING_NAME, self._on_mutations)
        await self.page.add_init_script(script=OBSERVER_SCRIPT)

    async def _on_mutations(self, source, lengths) -> None:
        self.handle_batch(MutationBatch(url=self.url, added_text_lengths=list(lengths)))

    def handle_batch(self, batch: MutationBatch) -> bool:
        if not batch.is_meaningful(self.min_text_length):
            return False
        self.debouncer.trigger()
        return True

    async def _emit(self) -> None:
        signal = ChangeSignal(url=self.url, timestamp=datetime.utcnow())
        logger.debug("Live change signal", url=self.url)
        await self.on_signal(signal)

    def detach(self) -> None:
        self.debouncer.cancel()


class RealtimeWatcher(AsyncContextManager):
    """Keeps one listening page open per active tracked URL."""

    def __init__(
        self,
        registry: TargetRegistry,
        browser: ManagedBrowser,
        provider: RenderContextProvider,
        on_signal: SignalHandler,
        monitor_settings: MonitorSettings,
        scraping_settings: ScrapingSettings,
    ):
        self.registry = registry
        self.browser = browser
        self.provider = provider
        self.on_signal = on_signal
        self.monitor_settings = monitor_settings
        self.scraping_settings = scraping_settings
        self.listeners: dict[str, RealtimeChangeListener] = {}

    async def setup(self) -> None:
        await self.sync()

    async def cleanup(self) -> None:
        for url in list(self.listeners):
            await self.unwatch(url)

    async def sync(self) -> None:
        """Watch exactly the URLs of the registry's active targets."""
        targets = await self.registry.list_targets()
        wanted = {target.url for target in targets if target.active}

        for url in list(self.listeners):
            if url not in wanted:
                await self.unwatch(url)

        for url in sorted(wanted - set(self.listeners)):
            await self.watch(url)

        logger.info("Realtime watcher synced", watched=len(self.listeners))

    async def watch(self, url: str) -> bool:
        try:
            page = await self.browser.new_page()
        except PlaywrightError as e:
            logger.warning("Could not open page for live watching", url=url, error=str(e))
            return False

        listener = RealtimeChangeListener(
            page,
            url,
            self.on_signal,
            min_text_length=self.monitor_settings.realtime_min_text_length,
            quiet_period=self.monitor_settings.realtime_quiet_period,
        )

        try:
            await listener.attach()
            await page.goto(
                url, wait_until="load", timeout=self.scraping_settings.render_timeout
            )
        except PlaywrightError as e:
            logger.warning("Could not open page for live watching", url=url, error=str(e))
            listener.detach()
            await page.context.close()
            return False

        self.listeners[url] = listener
        self.provider.adopt(url, page)
        logger.debug("Watching page", url=url)
        return True

    async def unwatch(self, url: str) -> None:
        listener = self.listeners.pop(url, None)
        if listener is None:
            return

        listener.detach()
        self.provider.release(url)
        try:
            await listener.page.context.close()
        except PlaywrightError as e:
            logger.warning("Failed to close watched page", url=url, error=str(e))
