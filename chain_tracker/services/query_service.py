# chain_tracker/services/query_service.py

"""Derived read views over live balances and stored snapshots."""

import asyncio
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from chain_tracker.config.settings import Settings
from chain_tracker.models.chain import Chain
from chain_tracker.models.snapshot import Snapshot, ms_to_iso, now_ms
from chain_tracker.providers.base_provider import BalanceProvider
from chain_tracker.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("chain_tracker.query")

_HOUR_MS = 60 * 60 * 1000


def percentage_change(baseline: float, current: float) -> float:
    """Percent change from *baseline* to *current*.

    A zero baseline yields 0.0 instead of inf/NaN.
    """
    if baseline == 0:
        return 0.0
    return (current - baseline) / baseline * 100


def format_change(change: float) -> str:
    """Two-decimal string without a negative zero."""
    return f"{round(change, 2) + 0.0:.2f}"


def parse_hours(raw: object, default: int | None = None) -> float:
    """Coerce a requested window to a positive number of hours.

    Missing, non-numeric, non-finite or non-positive input falls back
    to the default window instead of raising.
    """
    fallback = float(
        default if default is not None else Settings.DEFAULT_HISTORY_HOURS
    )
    if raw is None or isinstance(raw, bool):
        return fallback
    try:
        hours = float(str(raw).strip())
    except ValueError:
        return fallback
    if not math.isfinite(hours) or hours <= 0:
        return fallback
    return hours


@dataclass
class CurrentStats:
    """Live balances with change since tracking began."""

    base_balance: str
    base_gas_price: str
    base_change: float
    solana_balance: str
    solana_change: float
    snapshots_recorded: int
    tracking_since: int | None
    generated_at: int

    def to_dict(self) -> dict[str, object]:
        return {
            "current": {
                Chain.BASE.value: {
                    "balance": self.base_balance,
                    "gasPrice": self.base_gas_price,
                    "change": format_change(self.base_change),
                },
                Chain.SOLANA.value: {
                    "balance": self.solana_balance,
                    "change": format_change(self.solana_change),
                },
            },
            "metrics": {
                "snapshotsRecorded": self.snapshots_recorded,
                "trackingSince": (
                    ms_to_iso(self.tracking_since)
                    if self.tracking_since is not None
                    else None
                ),
            },
            "timestamp": ms_to_iso(self.generated_at),
        }


@dataclass
class HistoryView:
    """Snapshots inside a trailing window, oldest first."""

    hours: float
    snapshots: list[Snapshot] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.snapshots)

    def to_dict(self) -> dict[str, object]:
        return {
            "history": [
                {
                    "timestamp": s.timestamp,
                    "date": s.iso_date,
                    Chain.BASE.value: s.base_balance,
                    Chain.SOLANA.value: s.solana_balance,
                }
                for s in self.snapshots
            ],
            "count": self.count,
        }


@dataclass
class ActivitySummary:
    """Recording counts and weekly average balances."""

    last_24h: int
    last_7d: int
    total: int
    avg_base_balance: float | None
    avg_solana_balance: float | None

    def to_dict(self) -> dict[str, object]:
        return {
            "last24h": self.last_24h,
            "last7d": self.last_7d,
            "total": self.total,
            "avgBaseBalance": self.avg_base_balance,
            "avgSolanaBalance": self.avg_solana_balance,
        }


class QueryService:
    """Builds the stats, history and activity views."""

    def __init__(
        self,
        store: SnapshotStore,
        providers: Mapping[Chain, BalanceProvider],
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.providers = providers
        self._clock = clock

    async def current_stats(self) -> CurrentStats:
        """Fetch live balances and compare stored first/latest snapshots.

        Provider failures propagate: this view has no stale fallback.
        """
        base = self.providers[Chain.BASE]
        solana = self.providers[Chain.SOLANA]
        base_reading, gas_price, solana_reading = await asyncio.gather(
            asyncio.to_thread(base.get_balance),
            asyncio.to_thread(base.get_gas_price),
            asyncio.to_thread(solana.get_balance),
        )

        total = self.store.count()
        first = self.store.first()
        latest = self.store.latest()

        base_change = 0.0
        solana_change = 0.0
        if first is not None and latest is not None:
            base_change = percentage_change(
                first.base_balance, latest.base_balance,
            )
            solana_change = percentage_change(
                first.solana_balance, latest.solana_balance,
            )

        return CurrentStats(
            base_balance=base_reading.as_string(),
            base_gas_price=gas_price,
            base_change=base_change,
            solana_balance=solana_reading.as_string(),
            solana_change=solana_change,
            snapshots_recorded=total,
            tracking_since=first.timestamp if first else None,
            generated_at=self._clock(),
        )

    def history(self, hours: object = None) -> HistoryView:
        """Snapshots from the last *hours* (default 24)."""
        window = parse_hours(hours)
        now = self._clock()
        span = window * _HOUR_MS
        # Windows reaching past the epoch cover the whole history
        since = -1 if span >= now else now - int(span)
        snapshots = self.store.range_since(since)
        logger.debug(
            "History window %.2fh returned %d snapshots",
            window,
            len(snapshots),
        )
        return HistoryView(hours=window, snapshots=snapshots)

    def activity(self) -> ActivitySummary:
        now = self._clock()
        day_ago = now - Settings.ACTIVITY_SHORT_WINDOW_HOURS * _HOUR_MS
        week_ago = now - Settings.ACTIVITY_LONG_WINDOW_HOURS * _HOUR_MS
        averages = self.store.average_since(week_ago)
        return ActivitySummary(
            last_24h=self.store.count_since(day_ago),
            last_7d=self.store.count_since(week_ago),
            total=self.store.count(),
            avg_base_balance=(
                averages.base_balance if averages else None
            ),
            avg_solana_balance=(
                averages.solana_balance if averages else None
            ),
        )
