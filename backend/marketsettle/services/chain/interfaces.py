"""Capability interfaces for the market contract.

Settlement code depends on these protocols rather than on web3 directly, so a
deterministic in-memory double can stand in for a live node.
"""

from typing import Protocol

from .models import TransactionReceipt


class MarketReader(Protocol):
    """Read-only queries against a deployed market."""

    async def has_expired(self, market_address: str) -> bool: ...

    async def is_settled(self, market_address: str) -> bool: ...

    async def time_until_expiry(self, market_address: str) -> int: ...

    async def strike_price(self, market_address: str) -> int: ...

    async def settlement_price(self, market_address: str) -> int: ...

    async def settled_above_strike(self, market_address: str) -> bool: ...

    async def answer_timestamp(self, market_address: str) -> int: ...


class MarketWriter(Protocol):
    """State-mutating calls against a deployed market."""

    async def send_settle_market(self, market_address: str) -> str:
        """Submit ``settleMarket()`` and return the transaction hash once accepted."""
        ...

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TransactionReceipt:
        """Block until ``tx_hash`` is mined or ``timeout`` seconds pass."""
        ...


class MarketClient(MarketReader, MarketWriter, Protocol):
    """A client offering both capabilities."""
