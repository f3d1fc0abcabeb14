# chain_tracker/context.py

"""Process-scoped wiring of store, providers and services."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from chain_tracker.config.settings import Settings
from chain_tracker.models.chain import Chain
from chain_tracker.models.snapshot import now_ms
from chain_tracker.providers.base_provider import BalanceProvider
from chain_tracker.providers.evm_provider import EvmProvider
from chain_tracker.providers.solana_provider import SolanaProvider
from chain_tracker.services.query_service import QueryService
from chain_tracker.services.recorder import SnapshotRecorder
from chain_tracker.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("chain_tracker.context")


def build_providers() -> dict[Chain, BalanceProvider]:
    """Create one provider per tracked chain from Settings."""
    return {
        Chain.BASE: EvmProvider(
            Settings.BASE_RPC_URL, Settings.BASE_ADDRESS,
        ),
        Chain.SOLANA: SolanaProvider(
            Settings.SOLANA_RPC_URL,
            Settings.SOLANA_ADDRESS,
            Settings.SOLANA_COMMITMENT,
        ),
    }


@dataclass
class AppContext:
    """Everything the recorder and read paths share, built once."""

    store: SnapshotStore
    providers: dict[Chain, BalanceProvider]
    recorder: SnapshotRecorder
    query_service: QueryService

    @classmethod
    def create(
        cls,
        store: SnapshotStore | None = None,
        providers: dict[Chain, BalanceProvider] | None = None,
        db_path: Path | str | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> "AppContext":
        """Build a context; pass *store* / *providers* to inject fakes."""
        store = store or SnapshotStore(db_path)
        providers = providers or build_providers()
        context = cls(
            store=store,
            providers=providers,
            recorder=SnapshotRecorder(store, providers, clock=clock),
            query_service=QueryService(store, providers, clock=clock),
        )
        logger.debug(
            "AppContext ready with chains: %s",
            ", ".join(c.value for c in providers),
        )
        return context

    def close(self) -> None:
        """Release HTTP sessions and the database connection."""
        for provider in self.providers.values():
            provider.close()
        self.store.close()
