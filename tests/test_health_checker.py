# tests/test_health_checker.py

"""Tests for the RPC health checker service."""

import unittest
from unittest.mock import MagicMock, patch

from chain_tracker.models.chain import BalanceReading, Chain
from chain_tracker.providers.base_provider import BalanceProvider, ProviderError
from chain_tracker.services.health_checker import (
    HealthChecker,
    HealthResult,
    check_provider,
)


def _make_provider(chain: Chain = Chain.SOLANA) -> MagicMock:
    provider = MagicMock(spec=BalanceProvider)
    provider.chain = chain
    provider.get_balance.return_value = BalanceReading(
        chain=chain, address="So", amount=1_000_000_000, decimals=9,
    )
    return provider


class TestCheckProvider(unittest.TestCase):
    """Tests for the per-provider check function."""

    def test_ok_status(self) -> None:
        result = check_provider(_make_provider())
        self.assertEqual(result.status, "ok")
        self.assertEqual(result.chain, "solana")
        self.assertIn("1.000000000 SOL", result.message)

    def test_down_on_provider_error(self) -> None:
        provider = _make_provider()
        provider.get_balance.side_effect = ProviderError(
            Chain.SOLANA, "getBalance returned HTTP 429",
        )
        result = check_provider(provider)
        self.assertEqual(result.status, "down")
        self.assertIn("429", result.message)

    @patch("chain_tracker.services.health_checker.time")
    def test_slow_status(self, mock_time: MagicMock) -> None:
        """Latency above the threshold is reported as slow."""
        mock_time.monotonic.side_effect = [100.0, 106.5]
        result = check_provider(_make_provider())
        self.assertEqual(result.status, "slow")
        self.assertAlmostEqual(result.latency_ms, 6500.0)


class TestHealthChecker(unittest.IsolatedAsyncioTestCase):
    """Tests for the HealthChecker orchestrator."""

    @patch("chain_tracker.services.health_checker.check_provider")
    async def test_check_all_returns_all_providers(
        self, mock_check: MagicMock,
    ) -> None:
        """check_all should return one result per provider."""
        mock_check.return_value = HealthResult(
            chain="test",
            status="ok",
            latency_ms=100.0,
            message="",
        )
        checker = HealthChecker({
            Chain.BASE: _make_provider(Chain.BASE),
            Chain.SOLANA: _make_provider(Chain.SOLANA),
        })
        results = await checker.check_all()
        self.assertEqual(len(results), 2)
        self.assertEqual(mock_check.call_count, 2)


if __name__ == "__main__":
    unittest.main()
