"""APScheduler-based job scheduling for periodic target checks."""

from datetime import datetime
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config.settings import MonitorSettings
from ..storage.types import TrackedTarget
from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .orchestrator import ChangeMonitor
from .types import ScheduleMode, SchedulerError

logger = get_structured_logger(__name__)

GLOBAL_JOB_ID = "check-all"
SYNC_JOB_ID = "sync-jobs"
SYNC_INTERVAL_MINUTES = 1


def target_job_id(target_id: str) -> str:
    return f"check-{target_id}"


class SchedulerManager(AsyncContextManager):
    """Drives ChangeMonitor checks from an AsyncIOScheduler.

    In ``global`` mode a single job runs a full cycle at the shortest
    effective target interval and the cycle skips targets that are not yet
    due. In ``per_target`` mode every active target gets its own interval
    job. A sync job keeps either layout in step with the registry.
    """

    def __init__(self, monitor: ChangeMonitor, settings: MonitorSettings):
        self.monitor = monitor
        self.settings = settings
        self.mode = ScheduleMode(settings.schedule_mode)
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False
        self.start_time: Optional[datetime] = None

        self.total_jobs_executed = 0
        self.total_jobs_failed = 0

    async def setup(self) -> None:
        """Create and start the scheduler."""
        if self.is_running:
            return

        logger.info("Starting APScheduler manager", mode=self.mode.value)

        self.scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": AsyncIOExecutor()},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 30,
            },
            timezone="UTC",
        )
        self.scheduler.add_listener(self._on_job_executed, EVENT_JOB_EXECUTED)
        self.scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)

        try:
            await self.sync_jobs()
            self.scheduler.start()
        except (ValueError, LookupError) as e:
            raise SchedulerError(f"Scheduler startup failed: {str(e)}") from e

        self.is_running = True
        self.start_time = datetime.utcnow()
        logger.info("APScheduler manager started", jobs=len(self.scheduler.get_jobs()))

    async def cleanup(self) -> None:
        """Stop the scheduler."""
        if not self.is_running:
            return

        logger.info("Stopping APScheduler manager")
        self.scheduler.shutdown(wait=False)
        self.is_running = False

    def _on_job_executed(self, event) -> None:
        self.total_jobs_executed += 1
        logger.debug("Job executed", job_id=event.job_id)

    def _on_job_error(self, event) -> None:
        self.total_jobs_failed += 1
        logger.error("Job failed", job_id=event.job_id, error=str(event.exception))

    async def sync_jobs(self) -> None:
        """Reconcile scheduled jobs with the registry."""
        if self.scheduler is None:
            raise SchedulerError("Scheduler not initialized")

        targets = await self.monitor.registry.list_targets()
        active = [t for t in targets if t.active]

        self._ensure_job(
            SYNC_JOB_ID, self.sync_jobs, SYNC_INTERVAL_MINUTES, args=(), run_now=False
        )

        if self.mode == ScheduleMode.GLOBAL:
            self._ensure_job(
                GLOBAL_JOB_ID,
                self.monitor.run_cycle,
                self.global_tick_minutes(active),
                args=(),
            )
            return

        wanted = {target_job_id(t.id): t for t in active}

        for job in self.scheduler.get_jobs():
            if job.id != SYNC_JOB_ID and job.id not in wanted:
                self.scheduler.remove_job(job.id)
                logger.debug("Unscheduled target check", job_id=job.id)

        for job_id, target in wanted.items():
            self._ensure_job(
                job_id,
                self.monitor.check_with_timeout,
                target.effective_interval(self.settings.default_interval_minutes),
                args=(target.id,),
            )

    def global_tick_minutes(self, active: list[TrackedTarget]) -> int:
        """Shortest effective interval among active targets.

        Cycles skip targets that are not due, so ticking at the shortest
        interval lets a target interval below the default take effect.
        """
        default = self.settings.default_interval_minutes
        return min(
            (target.effective_interval(default) for target in active),
            default=default,
        )

    def _ensure_job(
        self, job_id: str, func, minutes: int, args: tuple, run_now: bool = True
    ) -> None:
        job = self.scheduler.get_job(job_id)

        if job is None:
            options = {"next_run_time": datetime.utcnow()} if run_now else {}
            self.scheduler.add_job(
                func,
                trigger=IntervalTrigger(minutes=minutes),
                args=args,
                id=job_id,
                name=job_id,
                **options,
            )
            logger.debug("Scheduled check job", job_id=job_id, minutes=minutes)
            return

        if job.trigger.interval.total_seconds() != minutes * 60:
            self.scheduler.reschedule_job(
                job_id, trigger=IntervalTrigger(minutes=minutes)
            )
            logger.debug("Rescheduled check job", job_id=job_id, minutes=minutes)

    def get_job_ids(self) -> list[str]:
        if self.scheduler is None:
            return []
        return sorted(job.id for job in self.scheduler.get_jobs())

    def get_stats(self) -> dict[str, object]:
        return {
            "mode": self.mode.value,
            "is_running": self.is_running,
            "start_time": self.start_time,
            "jobs": len(self.get_job_ids()),
            "executed": self.total_jobs_executed,
            "failed": self.total_jobs_failed,
        }
