# tests/test_scheduler.py

"""Tests for the periodic recording scheduler."""

import threading
import time
import unittest
from datetime import datetime
from unittest.mock import MagicMock

from chain_tracker.models.chain import BalanceReading, Chain
from chain_tracker.models.snapshot import Snapshot
from chain_tracker.providers.base_provider import BalanceProvider
from chain_tracker.services.recorder import SnapshotRecorder
from chain_tracker.services.scheduler import JOB_ID, RecordingScheduler
from chain_tracker.storage.snapshot_store import MEMORY, SnapshotStore


def _make_recorder(
    called: threading.Event | None = None,
    error: Exception | None = None,
) -> MagicMock:
    """Recorder stub whose record_snapshot is an async function."""
    recorder = MagicMock(spec=SnapshotRecorder)
    calls: list[int] = []

    async def _record() -> Snapshot | None:
        calls.append(1)
        if called is not None:
            called.set()
        if error is not None:
            raise error
        return None

    recorder.record_snapshot.side_effect = _record
    recorder.calls = calls
    return recorder


class TestRecordingScheduler(unittest.TestCase):
    """RecordingScheduler wiring and tick behaviour."""

    def test_job_configuration(self) -> None:
        """First run is immediate, overlapping runs are skipped."""
        backend = MagicMock()
        backend.running = False
        scheduler = RecordingScheduler(
            _make_recorder(), interval_minutes=15, scheduler=backend,
        )
        before = datetime.now()
        scheduler.start()

        backend.add_job.assert_called_once()
        args, kwargs = backend.add_job.call_args
        self.assertEqual(args[0], scheduler.tick)
        self.assertEqual(args[1], "interval")
        self.assertEqual(kwargs["minutes"], 15)
        self.assertEqual(kwargs["id"], JOB_ID)
        self.assertEqual(kwargs["max_instances"], 1)
        self.assertGreaterEqual(kwargs["next_run_time"], before)
        backend.start.assert_called_once()

    def test_default_interval_from_settings(self) -> None:
        from chain_tracker.config.settings import Settings

        scheduler = RecordingScheduler(
            _make_recorder(), scheduler=MagicMock(),
        )
        self.assertEqual(
            scheduler.interval_minutes, Settings.RECORD_INTERVAL_MINUTES,
        )

    def test_tick_runs_recorder(self) -> None:
        recorder = _make_recorder()
        RecordingScheduler(recorder, scheduler=MagicMock()).tick()
        self.assertEqual(len(recorder.calls), 1)

    def test_tick_survives_unexpected_error(self) -> None:
        """A crashing tick is logged and the scheduler keeps going."""
        recorder = _make_recorder(error=RuntimeError("boom"))
        scheduler = RecordingScheduler(recorder, scheduler=MagicMock())
        with self.assertLogs("chain_tracker.scheduler", level="ERROR") as logs:
            scheduler.tick()
        self.assertIn("boom", "\n".join(logs.output))

    def test_tick_returns_within_timeout_on_hung_provider(self) -> None:
        """A stuck balance call does not hold the tick past its timeout."""
        release = threading.Event()
        self.addCleanup(release.set)

        base = MagicMock(spec=BalanceProvider)
        base.get_balance.side_effect = lambda: release.wait(2.0)
        solana = MagicMock(spec=BalanceProvider)
        solana.get_balance.return_value = BalanceReading(
            chain=Chain.SOLANA, address="So", amount=10**9, decimals=9,
        )
        store = SnapshotStore(db_path=MEMORY)
        self.addCleanup(store.close)
        recorder = SnapshotRecorder(
            store,
            {Chain.BASE: base, Chain.SOLANA: solana},
            tick_timeout=0.2,
        )
        scheduler = RecordingScheduler(recorder, scheduler=MagicMock())

        started = time.monotonic()
        with self.assertLogs("chain_tracker.recorder", level="ERROR"):
            scheduler.tick()
        elapsed = time.monotonic() - started

        self.assertLess(elapsed, 1.0)
        self.assertEqual(store.count(), 0)

    def test_records_immediately_on_start(self) -> None:
        """A real background scheduler fires the first tick at once."""
        called = threading.Event()
        recorder = _make_recorder(called=called)
        scheduler = RecordingScheduler(recorder, interval_minutes=15)
        scheduler.start()
        try:
            self.assertTrue(scheduler.running)
            self.assertTrue(called.wait(timeout=5))
        finally:
            scheduler.shutdown(wait=True)
        self.assertFalse(scheduler.running)
        self.assertEqual(len(recorder.calls), 1)

    def test_shutdown_when_not_started_is_noop(self) -> None:
        backend = MagicMock()
        backend.running = False
        RecordingScheduler(_make_recorder(), scheduler=backend).shutdown()
        backend.shutdown.assert_not_called()


if __name__ == "__main__":
    unittest.main()
