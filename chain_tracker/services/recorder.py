# chain_tracker/services/recorder.py

"""Records one all-or-nothing balance snapshot per tick."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor

from chain_tracker.config.settings import Settings
from chain_tracker.models.chain import BalanceReading, Chain
from chain_tracker.models.snapshot import Snapshot, now_ms
from chain_tracker.providers.base_provider import BalanceProvider
from chain_tracker.storage.snapshot_store import SnapshotStore, StorageError

logger = logging.getLogger("chain_tracker.recorder")


class SnapshotRecorder:
    """Queries every provider, then writes a single snapshot row.

    Both balances are gathered before anything is written.  If either
    query fails the tick is dropped, so a stored row never pairs a
    fresh balance with a missing one.
    """

    def __init__(
        self,
        store: SnapshotStore,
        providers: Mapping[Chain, BalanceProvider],
        clock: Callable[[], int] = now_ms,
        tick_timeout: float | None = None,
    ) -> None:
        self.store = store
        self.providers = providers
        self._clock = clock
        self.tick_timeout = (
            tick_timeout
            if tick_timeout is not None
            else Settings.TICK_TIMEOUT
        )

    async def _fetch_balances(
        self,
    ) -> list[BalanceReading | BaseException]:
        """Query all chains concurrently, collecting errors as values.

        Calls run on a pool owned by this tick.  It is shut down without
        waiting, so an abandoned call never holds up the event loop's
        teardown in ``asyncio.run``.
        """
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(
            max_workers=len(Chain), thread_name_prefix="balance",
        )
        try:
            tasks = [
                loop.run_in_executor(
                    executor, self.providers[chain].get_balance,
                )
                for chain in Chain
            ]
            outcomes: list[BalanceReading | BaseException] = list(
                await asyncio.gather(*tasks, return_exceptions=True)
            )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return outcomes

    async def record_snapshot(self) -> Snapshot | None:
        """Run one recording tick.

        Returns the stored snapshot, or None when the tick was
        aborted.  Never raises for provider or storage failures.
        """
        try:
            outcomes = await asyncio.wait_for(
                self._fetch_balances(), timeout=self.tick_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Snapshot aborted: balance queries exceeded %.0fs",
                self.tick_timeout,
            )
            return None

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            for exc in failures:
                logger.error(
                    "Snapshot aborted: %s", exc, exc_info=exc,
                )
            return None

        readings: dict[Chain, BalanceReading] = {
            o.chain: o
            for o in outcomes
            if isinstance(o, BalanceReading)
        }
        base = readings[Chain.BASE].value
        solana = readings[Chain.SOLANA].value
        timestamp = self._clock()

        try:
            snapshot_id = await asyncio.to_thread(
                self.store.append, timestamp, base, solana,
            )
        except StorageError as exc:
            logger.error(
                "Snapshot aborted: %s", exc, exc_info=True,
            )
            return None

        logger.info(
            "Recorded snapshot %d: %s ETH, %s SOL",
            snapshot_id,
            readings[Chain.BASE].as_string(),
            readings[Chain.SOLANA].as_string(),
        )
        return Snapshot(
            id=snapshot_id,
            timestamp=timestamp,
            base_balance=base,
            solana_balance=solana,
        )
