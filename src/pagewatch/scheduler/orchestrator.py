"""Per-target check orchestration shared by the scheduler and realtime paths."""

from datetime import datetime
from typing import Optional

from ..config import get_settings
from ..config.settings import AppSettings, MonitorSettings
from ..notification.console import ConsoleNotifier
from ..notification.policy import NotificationPolicy
from ..notification.types import NotificationSource, Notifier, NotifierFailure
from ..realtime.types import ChangeSignal
from ..scraper.browser import ManagedBrowser, RenderContextProvider
from ..scraper.extractor import ContentExtractor
from ..scraper.hashing import ChangeDetector, ContentHasher
from ..scraper.strategies import (
    DirectRetrievalStrategy,
    FallbackChain,
    RenderedPageStrategy,
)
from ..scraper.transport import HttpTransport
from ..scraper.types import ScrapingError
from ..storage import get_registry
from ..storage.interface import TargetRegistry
from ..storage.types import RegistryInconsistency, TrackedTarget
from ..utils.async_utils import (
    AsyncContextManager,
    gather_with_limit,
    run_with_timeout,
)
from ..utils.logging import LoggingContextManager, get_structured_logger
from ..utils.types import AsyncTimeoutError
from .types import CheckReport, CheckStatus

logger = get_structured_logger(__name__)

REALTIME_PREVIEW = "Live content change detected"


class ChangeMonitor(AsyncContextManager):
    """Runs checks: extraction, fingerprinting, detection, notification, one write."""

    def __init__(
        self,
        registry: TargetRegistry,
        chain: FallbackChain,
        notifier: Notifier,
        settings: Optional[MonitorSettings] = None,
        policy: Optional[NotificationPolicy] = None,
        hasher: Optional[ContentHasher] = None,
        detector: Optional[ChangeDetector] = None,
    ):
        self.registry = registry
        self.chain = chain
        self.notifier = notifier
        self.settings = settings or MonitorSettings()
        self.policy = policy or NotificationPolicy(
            realtime_cooldown_seconds=self.settings.realtime_cooldown_seconds,
            scheduled_cooldown_seconds=self.settings.scheduled_cooldown_seconds,
        )
        self.hasher = hasher or ContentHasher()
        self.detector = detector or ChangeDetector()

        # Set by create_change_monitor; closed on cleanup
        self.browser: Optional[ManagedBrowser] = None
        self.provider: Optional[RenderContextProvider] = None
        self.transport: Optional[HttpTransport] = None

    async def cleanup(self) -> None:
        if self.transport:
            await self.transport.cleanup()
        if self.browser:
            await self.browser.cleanup()

    async def check_target(
        self, target_id: str, now: Optional[datetime] = None, force: bool = False
    ) -> CheckReport:
        """Check one target and commit its new state.

        Paused targets are skipped unless ``force`` is set. Extraction runs
        without holding the record lock and is bounded by
        ``check_timeout_seconds``; everything after it runs under the lock
        against a freshly read record and is never cut short by that timeout.
        """
        target = await self.registry.get_target(target_id)
        if target is None:
            return CheckReport(
                target_id=target_id,
                status=CheckStatus.SKIPPED,
                error="Target is not registered",
            )
        if not target.active and not force:
            return CheckReport(
                target_id=target_id,
                url=target.url,
                status=CheckStatus.SKIPPED,
                error="Target is paused",
            )

        with LoggingContextManager(target_id=target_id):
            try:
                result = await run_with_timeout(
                    self.chain.extract(target),
                    self.settings.check_timeout_seconds,
                    f"Extraction of {target_id} timed out",
                )
            except (ScrapingError, AsyncTimeoutError) as e:
                logger.warning("Check failed", url=target.url, error=str(e))
                return CheckReport(
                    target_id=target_id,
                    url=target.url,
                    status=CheckStatus.FAILED,
                    error=str(e),
                )

            digest = self.hasher.fingerprint(result.text)
            checked_at = now or datetime.utcnow()

            try:
                async with self.registry.record_lock(target_id):
                    report = await self._commit_check(
                        target_id, digest, result.text, checked_at
                    )
            except RegistryInconsistency as e:
                logger.warning("Target vanished during check", error=str(e))
                return CheckReport(
                    target_id=target_id,
                    url=target.url,
                    status=CheckStatus.SKIPPED,
                    error=str(e),
                )

            report.strategy = result.strategy
            logger.info(
                "Check complete",
                url=target.url,
                status=report.status.value,
                strategy=result.strategy,
                notified=report.notified,
            )
            return report

    async def _commit_check(
        self, target_id: str, digest: str, text: str, now: datetime
    ) -> CheckReport:
        current = await self.registry.get_target(target_id)
        if current is None:
            raise RegistryInconsistency(f"Target {target_id} was removed")

        detection = self.detector.detect(current.last_fingerprint, digest, now)

        notified = False
        if detection.has_changed and self.policy.should_notify(
            current, now, NotificationSource.SCHEDULED
        ):
            preview = text[: self.settings.preview_length]
            notified = await self._dispatch(current, preview)

        for key, value in detection.state_update.items():
            setattr(current, key, value)
        if notified:
            current.last_notified_at = now

        await self.registry.upsert_target(current)

        return CheckReport(
            target_id=target_id,
            url=current.url,
            status=CheckStatus(detection.kind.value),
            fingerprint=digest,
            notified=notified,
            checked_at=now,
        )

    async def _dispatch(self, target: TrackedTarget, preview: str) -> bool:
        """Deliver one alert; any delivery error counts as a notifier failure."""
        try:
            await run_with_timeout(
                self.notifier.notify(target, preview),
                self.settings.notify_timeout_seconds,
                f"Notification for {target.id} timed out",
            )
        except (NotifierFailure, AsyncTimeoutError) as e:
            logger.error(
                "Notification delivery failed", target_id=target.id, error=str(e)
            )
            return False
        except Exception:
            logger.exception("Notifier raised unexpectedly", target_id=target.id)
            return False
        return True

    async def check_with_timeout(
        self, target_id: str, force: bool = False
    ) -> CheckReport:
        """Check one target, converting any unexpected error into a report."""
        try:
            return await self.check_target(target_id, force=force)
        except Exception as e:
            logger.exception("Unexpected check error", target_id=target_id)
            return CheckReport(
                target_id=target_id, status=CheckStatus.FAILED, error=str(e)
            )

    async def run_cycle(
        self, now: Optional[datetime] = None, only_due: bool = True
    ) -> list[CheckReport]:
        """Check every active target, by default only those whose interval has elapsed."""
        now = now or datetime.utcnow()
        targets = await self.registry.list_targets()
        due = [
            target
            for target in targets
            if target.active
            and (
                not only_due
                or target.is_due(now, self.settings.default_interval_minutes)
            )
        ]

        logger.info("Starting check cycle", total=len(targets), due=len(due))

        reports = await gather_with_limit(
            *[self.check_with_timeout(target.id) for target in due],
            limit=self.settings.max_concurrent_checks,
        )

        failed = sum(1 for report in reports if report.status == CheckStatus.FAILED)
        logger.info("Check cycle complete", checked=len(reports), failed=failed)
        return reports

    async def handle_change_signal(self, signal: ChangeSignal) -> bool:
        """Notify for a live change if the realtime cooldown allows it.

        Only ``last_notified_at`` is written; fingerprints are left to the
        next scheduled check.
        """
        targets = [
            target
            for target in await self.registry.list_targets()
            if target.url == signal.url and target.active
        ]
        if not targets:
            logger.debug("Ignoring signal for untracked page", url=signal.url)
            return False

        notified = False
        for target in targets:
            async with self.registry.record_lock(target.id):
                current = await self.registry.get_target(target.id)
                if current is None or not current.active:
                    continue
                if not self.policy.should_notify(
                    current, signal.timestamp, NotificationSource.REALTIME
                ):
                    continue
                if not await self._dispatch(current, REALTIME_PREVIEW):
                    continue

                current.last_notified_at = signal.timestamp
                await self.registry.upsert_target(current)
                notified = True

            logger.info("Live change notified", target_id=target.id, url=signal.url)

        return notified


async def create_notifier(settings: AppSettings) -> Notifier:
    """Slack when a bot token and channel are configured, console otherwise."""
    if settings.slack.enabled:
        from ..notification.slack import SlackNotifier, get_slack_manager

        manager = await get_slack_manager(settings.slack)
        return SlackNotifier(manager, settings.slack.channel)

    return ConsoleNotifier()


async def create_change_monitor(
    settings: Optional[AppSettings] = None,
    registry: Optional[TargetRegistry] = None,
    notifier: Optional[Notifier] = None,
) -> ChangeMonitor:
    """Wire a ChangeMonitor from application settings."""
    settings = settings or get_settings()
    registry = registry or await get_registry()
    notifier = notifier or await create_notifier(settings)

    transport = HttpTransport(settings.scraping)
    await transport.setup()
    browser = ManagedBrowser(settings.scraping)
    provider = RenderContextProvider(browser, settings.scraping)
    extractor = ContentExtractor()

    chain = FallbackChain(
        direct=DirectRetrievalStrategy(transport, extractor),
        rendered=RenderedPageStrategy(
            provider, extractor, settings.scraping.render_timeout
        ),
        direct_timeout=settings.scraping.request_timeout,
    )

    monitor = ChangeMonitor(registry, chain, notifier, settings.monitor)
    monitor.transport = transport
    monitor.browser = browser
    monitor.provider = provider
    return monitor


# Global change monitor instance
_change_monitor: Optional[ChangeMonitor] = None


async def get_change_monitor() -> ChangeMonitor:
    """Get or create the global change monitor."""
    global _change_monitor

    if _change_monitor is None:
        _change_monitor = await create_change_monitor()

    return _change_monitor


async def cleanup_change_monitor() -> None:
    """Clean up the global change monitor."""
    global _change_monitor

    if _change_monitor:
        await _change_monitor.cleanup()
        _change_monitor = None
