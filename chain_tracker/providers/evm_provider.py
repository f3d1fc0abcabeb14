# chain_tracker/providers/evm_provider.py

"""Base (EVM) balance and gas price provider."""

import re

from chain_tracker.models.chain import BalanceReading, Chain, format_units
from chain_tracker.providers.base_provider import BalanceProvider, ProviderError

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

WEI_DECIMALS = 18
GWEI_DECIMALS = 9


class EvmProvider(BalanceProvider):
    """Reads ETH balances and gas price from a Base JSON-RPC node."""

    chain = Chain.BASE

    def validate_address(self) -> None:
        if not _ADDRESS_RE.match(self.address):
            raise ProviderError(
                self.chain, f"malformed address: {self.address!r}"
            )

    def _parse_quantity(self, method: str, raw: object) -> int:
        """Decode a hex-encoded JSON-RPC quantity."""
        if not isinstance(raw, str) or not raw.startswith("0x"):
            raise ProviderError(
                self.chain, f"{method} returned non-hex quantity {raw!r}"
            )
        try:
            return int(raw, 16)
        except ValueError as exc:
            raise ProviderError(
                self.chain, f"{method} returned non-hex quantity {raw!r}"
            ) from exc

    def get_balance(self) -> BalanceReading:
        self.validate_address()
        raw = self._rpc("eth_getBalance", [self.address, "latest"])
        wei = self._parse_quantity("eth_getBalance", raw)
        return BalanceReading(
            chain=self.chain,
            address=self.address,
            amount=wei,
            decimals=WEI_DECIMALS,
        )

    def get_gas_price(self) -> str:
        raw = self._rpc("eth_gasPrice", [])
        if raw is None:
            return "0"
        wei = self._parse_quantity("eth_gasPrice", raw)
        return format_units(wei, GWEI_DECIMALS)
