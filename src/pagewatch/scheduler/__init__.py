"""Scheduling and orchestration of target checks.

This module provides:
- ChangeMonitor, running one check per target and handling live signals
- SchedulerManager, driving periodic checks through APScheduler
"""

from .manager import GLOBAL_JOB_ID, SchedulerManager, target_job_id
from .orchestrator import (
    REALTIME_PREVIEW,
    ChangeMonitor,
    cleanup_change_monitor,
    create_change_monitor,
    create_notifier,
    get_change_monitor,
)
from .types import CheckReport, CheckStatus, ScheduleMode, SchedulerError

__all__ = [
    "SchedulerError",
    "ScheduleMode",
    "CheckStatus",
    "CheckReport",
    "ChangeMonitor",
    "REALTIME_PREVIEW",
    "create_notifier",
    "create_change_monitor",
    "get_change_monitor",
    "cleanup_change_monitor",
    "SchedulerManager",
    "GLOBAL_JOB_ID",
    "target_job_id",
]
