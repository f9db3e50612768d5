"""Cron-driven trigger for :meth:`SyncRunner.run_all`.

Uses asyncio + croniter: sleep until the next fire time of the configured
expression, run one batch, repeat until the stop event is set.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import datetime

import structlog
from croniter import croniter

from .models import OutcomeStatus, ServiceStatus, SyncReport
from .runner import SyncRunner

logger = structlog.get_logger()


class CronScheduler:
    """Runs a non-forced batch on every fire time of *cron*.

    A batch in progress is never overlapped; a fire time that passes while
    a batch runs is skipped.
    """

    def __init__(
        self,
        runner: SyncRunner,
        cron: str,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if not croniter.is_valid(cron):
            raise ValueError(f"invalid cron expression: {cron!r}")
        self.runner = runner
        self.cron = cron
        self._clock = clock
        self._run_lock = asyncio.Lock()
        self.status: ServiceStatus = ServiceStatus.STARTING
        self.start_time: float = time.monotonic()
        self.next_run_at: datetime | None = None
        self.stop_event: asyncio.Event | None = None

    def next_fire(self, after: datetime) -> datetime:
        return croniter(self.cron, after).get_next(datetime)

    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    async def trigger(
        self,
        force_all: bool = False,
        since: datetime | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> SyncReport:
        """Run one batch now, waiting for any batch already in progress.

        Without an explicit *cancel_event* the run is cancelled by the stop
        event of :meth:`run_forever`, so a manual run also ends on shutdown.
        """
        cancel_event = cancel_event or self.stop_event
        async with self._run_lock:
            self.status = ServiceStatus.SYNCING
            try:
                report = await self.runner.run_all(force_all, since, cancel_event=cancel_event)
            except Exception:
                self.status = ServiceStatus.DEGRADED
                logger.exception("scheduled_run_error")
                raise
            failed = report.count(OutcomeStatus.FAILED)
            self.status = ServiceStatus.DEGRADED if failed else ServiceStatus.IDLE
            return report

    async def run_forever(self, stop_event: asyncio.Event) -> None:
        """Fire batches on schedule until *stop_event* is set.

        The stop event doubles as the run's cancel signal, so a shutdown
        aborts the tenant in progress without a watermark write.
        """
        self.stop_event = stop_event
        self.start_time = time.monotonic()
        self.status = ServiceStatus.IDLE
        logger.info("scheduler_started", cron=self.cron)

        try:
            while not stop_event.is_set():
                now = self._clock()
                self.next_run_at = self.next_fire(now)
                delay = max(0.0, (self.next_run_at - now).total_seconds())
                logger.info("scheduler_waiting", next_run_at=self.next_run_at.isoformat())

                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=delay)
                    break
                except TimeoutError:
                    pass

                try:
                    await self.trigger(cancel_event=stop_event)
                except Exception:
                    # Logged in trigger(); keep the schedule alive.
                    continue
        finally:
            self.status = ServiceStatus.STOPPED
            logger.info("scheduler_stopped")
