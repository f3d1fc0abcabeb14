# chain_tracker/services/scheduler.py

"""Periodic trigger for the snapshot recorder."""

import asyncio
import logging
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler

from chain_tracker.config.settings import Settings
from chain_tracker.services.recorder import SnapshotRecorder

logger = logging.getLogger("chain_tracker.scheduler")

JOB_ID = "record_snapshot"


class RecordingScheduler:
    """Runs a recording tick at startup and then on a fixed interval.

    A tick takes seconds while the interval is minutes, so ticks are
    not expected to overlap.  If one does run long, the next firing
    is skipped (``max_instances=1``) rather than queued.
    """

    def __init__(
        self,
        recorder: SnapshotRecorder,
        interval_minutes: float | None = None,
        scheduler: BaseScheduler | None = None,
    ) -> None:
        self.recorder = recorder
        self.interval_minutes = (
            interval_minutes
            if interval_minutes is not None
            else Settings.RECORD_INTERVAL_MINUTES
        )
        self._scheduler = scheduler or BackgroundScheduler(daemon=True)

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def tick(self) -> None:
        """Execute one recording tick on the scheduler's worker thread."""
        try:
            asyncio.run(self.recorder.record_snapshot())
        except Exception as exc:
            logger.error(
                "Recording tick crashed: %s", exc, exc_info=True,
            )

    def start(self) -> None:
        """Schedule the first tick immediately and the rest every interval."""
        self._scheduler.add_job(
            self.tick,
            "interval",
            minutes=self.interval_minutes,
            id=JOB_ID,
            next_run_time=datetime.now(),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Recording every %s minutes", self.interval_minutes,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop scheduling; with *wait* an in-flight tick finishes first."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Scheduler stopped")
