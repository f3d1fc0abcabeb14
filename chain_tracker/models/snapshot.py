# chain_tracker/models/snapshot.py

"""Balance snapshot models for the time-series store."""

import time
from dataclasses import dataclass
from datetime import datetime, timezone


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def ms_to_iso(timestamp_ms: int) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string with ``Z``."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Snapshot:
    """Both tracked balances captured at a single instant."""

    id: int
    timestamp: int  # epoch milliseconds
    base_balance: float
    solana_balance: float
    base_usd: float | None = None
    solana_usd: float | None = None

    @property
    def iso_date(self) -> str:
        return ms_to_iso(self.timestamp)


@dataclass(frozen=True)
class BalanceAverages:
    """Mean balances over a non-empty time window."""

    base_balance: float
    solana_balance: float
    sample_count: int
