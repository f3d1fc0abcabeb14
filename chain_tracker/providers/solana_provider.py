# chain_tracker/providers/solana_provider.py

"""Solana balance provider."""

import re
from typing import Any

from chain_tracker.models.chain import BalanceReading, Chain
from chain_tracker.providers.base_provider import BalanceProvider, ProviderError

# Base58 alphabet, 32-byte public keys encode to 32-44 chars
_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

LAMPORT_DECIMALS = 9


class SolanaProvider(BalanceProvider):
    """Reads SOL balances from a Solana JSON-RPC node."""

    chain = Chain.SOLANA

    def __init__(
        self,
        rpc_url: str,
        address: str,
        commitment: str | None = None,
    ) -> None:
        super().__init__(rpc_url, address)
        self.commitment = commitment or self.settings.SOLANA_COMMITMENT

    def validate_address(self) -> None:
        if not _ADDRESS_RE.match(self.address):
            raise ProviderError(
                self.chain, f"malformed address: {self.address!r}"
            )

    def get_balance(self) -> BalanceReading:
        self.validate_address()
        result: Any = self._rpc(
            "getBalance",
            [self.address, {"commitment": self.commitment}],
        )
        lamports = (
            result.get("value") if isinstance(result, dict) else None
        )
        if not isinstance(lamports, int) or isinstance(lamports, bool):
            raise ProviderError(
                self.chain, f"getBalance returned unexpected result {result!r}"
            )
        return BalanceReading(
            chain=self.chain,
            address=self.address,
            amount=lamports,
            decimals=LAMPORT_DECIMALS,
        )
