# chain_tracker/services/health_checker.py

"""RPC endpoint connectivity health checker."""

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass

from chain_tracker.config.settings import Settings
from chain_tracker.models.chain import Chain
from chain_tracker.providers.base_provider import BalanceProvider

logger = logging.getLogger("chain_tracker.health")


@dataclass
class HealthResult:
    """Result of a single RPC endpoint check."""

    chain: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def check_provider(provider: BalanceProvider) -> HealthResult:
    """Fetch the tracked balance once and time the round trip."""
    chain = provider.chain.value
    start = time.monotonic()
    try:
        reading = provider.get_balance()
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            chain=chain,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )
    elapsed_ms = (time.monotonic() - start) * 1000

    if elapsed_ms > Settings.HEALTH_SLOW_MS:
        return HealthResult(
            chain=chain,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )

    return HealthResult(
        chain=chain,
        status="ok",
        latency_ms=elapsed_ms,
        message=f"{reading.as_string()} {provider.chain.symbol}",
    )


class HealthChecker:
    """Runs concurrent checks against every configured provider."""

    def __init__(
        self, providers: Mapping[Chain, BalanceProvider],
    ) -> None:
        self.providers = providers

    async def check_all(self) -> list[HealthResult]:
        """Check every provider concurrently."""
        tasks = [
            asyncio.to_thread(check_provider, provider)
            for provider in self.providers.values()
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.chain,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
