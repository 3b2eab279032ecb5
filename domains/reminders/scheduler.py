"""Run the reminder poller on an aligned, fixed-interval APScheduler job."""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from logger import logger
from .aligner import next_tick_at, utc_now
from .config import POLL_JOB_ID, POLL_TIMEOUT_SECONDS, TICK_OFFSET_SECONDS
from .errors import ConfigurationError
from .poller import ReminderPoller


class ReminderScheduler:
    """Owns the polling job: start/stop lifecycle and the tick itself.

    The first tick lands `offset_seconds` past a minute boundary; after that
    ticks repeat every `interval_seconds` without realignment, so drift can
    accumulate over long uptimes.

    Usage:
        scheduler = ReminderScheduler(poller, interval_seconds=60)
        scheduler.start()   # inside a running event loop
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        poller: ReminderPoller,
        interval_seconds: Optional[float],
        scheduler: Optional[AsyncIOScheduler] = None,
        clock: Callable[[], datetime] = utc_now,
        offset_seconds: int = TICK_OFFSET_SECONDS,
        poll_timeout: float = POLL_TIMEOUT_SECONDS
    ):
        self.poller = poller
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.offset_seconds = offset_seconds
        self.poll_timeout = poll_timeout

        # Only shut down schedulers we created ourselves
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

        self.first_run_at: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self.scheduler.get_job(POLL_JOB_ID) is not None

    def start(self) -> datetime:
        """Register the polling job (and start the scheduler if we own it).

        Returns:
            Time of the first, aligned tick

        Raises:
            ConfigurationError: interval missing or not positive
        """
        if not self.interval_seconds or self.interval_seconds <= 0:
            raise ConfigurationError(
                f"REMINDERS_POLLING_INTERVAL must be a positive number of seconds, got {self.interval_seconds!r}"
            )

        self.first_run_at = next_tick_at(self.clock(), self.offset_seconds)

        self.scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(
                seconds=self.interval_seconds,
                start_date=self.first_run_at,
                timezone=timezone.utc
            ),
            id=POLL_JOB_ID,
            # Pinned so a tick only milliseconds away is not pushed back a whole interval
            next_run_time=self.first_run_at,
            name="Poll for due reminders",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=max(1, int(self.interval_seconds)),
            replace_existing=True
        )

        if self._owns_scheduler and not self.scheduler.running:
            self.scheduler.start()

        logger.info(
            f"Started reminder polling (every {self.interval_seconds}s, "
            f"first tick at {self.first_run_at.strftime('%H:%M:%S')} UTC)"
        )
        return self.first_run_at

    def stop(self) -> None:
        """Remove the polling job; shut the scheduler down if we own it."""
        try:
            self.scheduler.remove_job(POLL_JOB_ID)
        except JobLookupError:
            pass

        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        logger.info("Stopped reminder polling")

    async def _tick(self) -> None:
        """One scheduled poll, bounded so a stuck call cannot starve later ticks."""
        try:
            await asyncio.wait_for(self.poller.poll_once(), timeout=self.poll_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Reminder poll exceeded {self.poll_timeout}s and was cancelled")
        except Exception as e:
            logger.error(f"Reminder tick failed: {e}", exc_info=True)

    def get_status(self) -> dict:
        job = self.scheduler.get_job(POLL_JOB_ID)
        next_run = getattr(job, "next_run_time", None) if job else None
        return {
            "running": job is not None,
            "interval_seconds": self.interval_seconds,
            "first_run_at": self.first_run_at.isoformat() if self.first_run_at else None,
            "next_run_at": next_run.isoformat() if next_run else None,
            **self.poller.get_stats(),
        }
