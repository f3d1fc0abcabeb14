# chain_tracker/models/chain.py

"""Tracked chains and raw balance readings."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class Chain(str, Enum):
    """The two chains whose wallet balances are tracked."""

    BASE = "base"
    SOLANA = "solana"

    @property
    def symbol(self) -> str:
        return "ETH" if self is Chain.BASE else "SOL"


def format_units(amount: int, decimals: int) -> str:
    """Format an integer amount of base units as a decimal string.

    Trailing zeros are stripped but at least one fractional digit is
    kept, so ``10**18`` wei with 18 decimals renders as ``"1.0"``.
    """
    value = Decimal(amount).scaleb(-decimals)
    text = f"{value:f}"
    if "." not in text:
        return f"{text}.0"
    whole, frac = text.split(".")
    frac = frac.rstrip("0") or "0"
    return f"{whole}.{frac}"


@dataclass(frozen=True)
class BalanceReading:
    """A live balance as returned by a chain RPC endpoint."""

    chain: Chain
    address: str
    amount: int  # smallest indivisible unit (wei, lamports)
    decimals: int

    @property
    def value(self) -> float:
        """Balance in the chain's native unit."""
        return float(Decimal(self.amount).scaleb(-self.decimals))

    def as_string(self) -> str:
        """Full-precision native-unit balance for display."""
        if self.chain is Chain.SOLANA:
            return f"{Decimal(self.amount).scaleb(-self.decimals):.{self.decimals}f}"
        return format_units(self.amount, self.decimals)
