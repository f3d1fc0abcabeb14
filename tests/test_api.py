# tests/test_api.py

"""Tests for the Flask JSON API using the test client."""

import unittest
from unittest.mock import MagicMock

from chain_tracker.api.app import create_app
from chain_tracker.context import AppContext
from chain_tracker.models.chain import BalanceReading, Chain
from chain_tracker.providers.base_provider import BalanceProvider, ProviderError
from chain_tracker.storage.snapshot_store import MEMORY, SnapshotStore, StorageError

HOUR_MS = 3_600_000
NOW = 1_760_000_000_000


def _make_providers() -> dict[Chain, BalanceProvider]:
    base = MagicMock(spec=BalanceProvider)
    base.chain = Chain.BASE
    base.get_balance.return_value = BalanceReading(
        chain=Chain.BASE, address="0x", amount=10**18, decimals=18,
    )
    base.get_gas_price.return_value = "0.01"
    solana = MagicMock(spec=BalanceProvider)
    solana.chain = Chain.SOLANA
    solana.get_balance.return_value = BalanceReading(
        chain=Chain.SOLANA, address="So", amount=5 * 10**9, decimals=9,
    )
    return {Chain.BASE: base, Chain.SOLANA: solana}


class TestApi(unittest.TestCase):
    """Route shapes and error mapping."""

    def setUp(self) -> None:
        self.store = SnapshotStore(db_path=MEMORY)
        self.providers = _make_providers()
        self.context = AppContext.create(
            store=self.store,
            providers=self.providers,
            clock=lambda: NOW,
        )
        self.client = create_app(self.context).test_client()

    def tearDown(self) -> None:
        self.store.close()

    def test_health(self) -> None:
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["status"], "ok")
        self.assertIn("timestamp", body)

    def test_stats_shape(self) -> None:
        self.store.append(NOW - 2000, 1.0, 4.0)
        self.store.append(NOW - 1000, 1.1, 5.0)

        resp = self.client.get("/api/stats")
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(
            body["current"]["base"],
            {"balance": "1.0", "gasPrice": "0.01", "change": "10.00"},
        )
        self.assertEqual(
            body["current"]["solana"],
            {"balance": "5.000000000", "change": "25.00"},
        )
        self.assertEqual(body["metrics"]["snapshotsRecorded"], 2)
        self.assertIsNotNone(body["metrics"]["trackingSince"])

    def test_stats_provider_error_is_500(self) -> None:
        self.providers[Chain.BASE].get_balance.side_effect = ProviderError(
            Chain.BASE, "timeout",
        )
        with self.assertLogs("chain_tracker.api", level="ERROR"):
            resp = self.client.get("/api/stats")
        self.assertEqual(resp.status_code, 500)
        self.assertIn("timeout", resp.get_json()["error"])

    def test_history(self) -> None:
        self.store.append(NOW - 2 * HOUR_MS, 1.0, 2.0)
        self.store.append(NOW - 30 * HOUR_MS, 1.0, 2.0)

        body = self.client.get("/api/history").get_json()
        self.assertEqual(body["count"], 1)
        self.assertEqual(body["history"][0]["base"], 1.0)
        self.assertEqual(body["history"][0]["solana"], 2.0)
        self.assertTrue(body["history"][0]["date"].endswith("Z"))

        body = self.client.get("/api/history?hours=1").get_json()
        self.assertEqual(body, {"history": [], "count": 0})

        body = self.client.get("/api/history?hours=48").get_json()
        self.assertEqual(body["count"], 2)

    def test_history_non_numeric_hours_is_not_an_error(self) -> None:
        self.store.append(NOW - 2 * HOUR_MS, 1.0, 2.0)
        resp = self.client.get("/api/history?hours=banana")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["count"], 1)

    def test_history_huge_hours_is_not_an_error(self) -> None:
        self.store.append(NOW - 2 * HOUR_MS, 1.0, 2.0)
        resp = self.client.get("/api/history?hours=1e20")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["count"], 1)

    def test_activity(self) -> None:
        self.store.append(NOW - 2 * HOUR_MS, 2.0, 6.0)
        body = self.client.get("/api/activity").get_json()
        self.assertEqual(
            body,
            {
                "last24h": 1,
                "last7d": 1,
                "total": 1,
                "avgBaseBalance": 2.0,
                "avgSolanaBalance": 6.0,
            },
        )

    def test_storage_error_is_500(self) -> None:
        broken = MagicMock()
        broken.count.side_effect = StorageError("database is locked")
        self.context.query_service.store = broken
        with self.assertLogs("chain_tracker.api", level="ERROR"):
            resp = self.client.get("/api/activity")
        self.assertEqual(resp.status_code, 500)
        self.assertIn("locked", resp.get_json()["error"])

    def test_unknown_route_is_404(self) -> None:
        self.assertEqual(self.client.get("/nope").status_code, 404)

    def test_cors_header(self) -> None:
        resp = self.client.get(
            "/api/activity", headers={"Origin": "http://example.com"},
        )
        self.assertIn("Access-Control-Allow-Origin", resp.headers)


if __name__ == "__main__":
    unittest.main()
