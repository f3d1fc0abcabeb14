# chain_tracker/providers/base_provider.py

"""Abstract base class for chain balance providers."""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any

from curl_cffi import requests as curl_requests

from chain_tracker.config.settings import Settings
from chain_tracker.models.chain import BalanceReading, Chain


class ProviderError(Exception):
    """A remote balance or fee query failed."""

    def __init__(self, chain: Chain, message: str) -> None:
        super().__init__(f"[{chain.value}] {message}")
        self.chain = chain


class BalanceProvider(ABC):
    """JSON-RPC client for one chain's balance endpoint.

    A single request is made per call; there is no retry loop here
    because the recording interval already acts as the retry.
    """

    chain: Chain

    def __init__(self, rpc_url: str, address: str) -> None:
        self.rpc_url = rpc_url
        self.address = address
        self.logger = logging.getLogger(
            f"chain_tracker.provider.{self.chain.value}"
        )
        self.settings = Settings()
        self.session = curl_requests.Session()
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT
        self._ids = itertools.count(1)

    def _rpc(self, method: str, params: list[Any]) -> Any:
        """POST one JSON-RPC call and return its ``result`` member.

        Raises:
            ProviderError: on transport failure, non-200 status, an RPC
                error object or a body without ``result``.
        """
        payload: dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            resp = self.session.post(
                self.rpc_url,
                headers=self.settings.DEFAULT_HEADERS,
                json=payload,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            raise ProviderError(
                self.chain, f"{method} request failed: {exc}"
            ) from exc

        if resp.status_code != 200:
            raise ProviderError(
                self.chain, f"{method} returned HTTP {resp.status_code}"
            )

        try:
            body: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise ProviderError(
                self.chain, f"{method} returned invalid JSON"
            ) from exc

        if body.get("error"):
            error = body["error"]
            message = (
                error.get("message", error)
                if isinstance(error, dict)
                else error
            )
            raise ProviderError(
                self.chain, f"{method} RPC error: {message}"
            )
        if "result" not in body:
            raise ProviderError(
                self.chain, f"{method} response has no result"
            )

        self.logger.debug(
            "[%s] %s ok", self.chain.value, method,
        )
        return body["result"]

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    @abstractmethod
    def validate_address(self) -> None:
        """Raise ProviderError if the configured address is malformed."""
        ...

    @abstractmethod
    def get_balance(self) -> BalanceReading:
        """Return the tracked address's current balance."""
        ...

    def get_gas_price(self) -> str:
        """Return the current gas price in gwei, where the chain has one."""
        raise ProviderError(
            self.chain, "gas price is not available on this chain"
        )
