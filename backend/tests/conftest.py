"""Shared fixtures: an in-memory market contract and a deployment registry on disk."""

import asyncio
import json
from pathlib import Path

import pytest

from marketsettle.config import NetworkContext
from marketsettle.services.chain import (
    ChainQueryError,
    TransactionReceipt,
    TransactionRefusedError,
)

MARKET_ADDRESS = "0xabcdabcdabcdabcdabcdabcdabcdabcdabcdabcd"
PRICE_FEED_ADDRESS = "0x1234123412341234123412341234123412341234"

STRIKE_PRICE = 45_000_000_000_000_000_000
SETTLEMENT_PRICE = 50_000_000_000_000_000_000
ANSWER_TIMESTAMP = 1_735_689_600


class FakeMarket:
    """Deterministic stand-in for a deployed MyMarket contract.

    Every call yields to the event loop once, so concurrent runs interleave
    the way they would against a real node. Like the contract, it accepts
    exactly one settlement.
    """

    def __init__(
        self,
        has_expired: bool = True,
        is_settled: bool = False,
        strike_price: int = STRIKE_PRICE,
        settlement_price: int = SETTLEMENT_PRICE,
        answer_timestamp: int = ANSWER_TIMESTAMP,
        seconds_until_expiry: int = 0,
        gas_used: int = 51_234,
        revert_in_receipt: bool = False,
        failing_reads: tuple[str, ...] = (),
        send_error: Exception | None = None,
        receipt_error: Exception | None = None,
    ):
        self.expired = has_expired
        self.settled = is_settled
        self._strike_price = strike_price
        self._settlement_price = settlement_price
        self._answer_timestamp = answer_timestamp
        self.seconds_until_expiry = seconds_until_expiry
        self.gas_used = gas_used
        self.revert_in_receipt = revert_in_receipt
        self.failing_reads = set(failing_reads)
        self.send_error = send_error
        self.receipt_error = receipt_error

        self.calls: list[str] = []
        self.sent: list[str] = []

    async def _read(self, name: str, value):
        self.calls.append(name)
        await asyncio.sleep(0)
        if name in self.failing_reads:
            raise ChainQueryError(f"{name}() failed: connection refused")
        return value

    async def has_expired(self, market_address: str) -> bool:
        return await self._read("hasExpired", self.expired)

    async def is_settled(self, market_address: str) -> bool:
        return await self._read("isSettled", self.settled)

    async def time_until_expiry(self, market_address: str) -> int:
        return await self._read("timeUntilExpiry", self.seconds_until_expiry)

    async def strike_price(self, market_address: str) -> int:
        return await self._read("STRIKE_PRICE", self._strike_price)

    async def settlement_price(self, market_address: str) -> int:
        return await self._read(
            "settlementPrice", self._settlement_price if self.settled else 0
        )

    async def settled_above_strike(self, market_address: str) -> bool:
        return await self._read(
            "settledAboveStrike",
            self.settled and self._settlement_price > self._strike_price,
        )

    async def answer_timestamp(self, market_address: str) -> int:
        return await self._read(
            "answerTimestamp", self._answer_timestamp if self.settled else 0
        )

    async def send_settle_market(self, market_address: str) -> str:
        self.calls.append("settleMarket")
        await asyncio.sleep(0)
        if self.send_error is not None:
            raise self.send_error
        if not self.expired:
            raise TransactionRefusedError("execution reverted: market not expired")
        if self.settled:
            raise TransactionRefusedError("execution reverted: already settled")

        tx_hash = "0x" + f"{len(self.sent) + 1:064x}"
        self.sent.append(tx_hash)
        if not self.revert_in_receipt:
            self.settled = True
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TransactionReceipt:
        self.calls.append("waitForReceipt")
        await asyncio.sleep(0)
        if self.receipt_error is not None:
            raise self.receipt_error
        return TransactionReceipt(
            transaction_hash=tx_hash,
            gas_used=self.gas_used,
            block_number=48_000_000 + len(self.sent),
            status=0 if self.revert_in_receipt else 1,
        )


def write_registry(path: Path, entries: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(entries, indent=2))
    return path


@pytest.fixture
def context() -> NetworkContext:
    return NetworkContext(
        name="bscTestnet",
        chain_id=97,
        rpc_url="http://127.0.0.1:8545",
        private_key="0x" + "11" * 32,
    )


@pytest.fixture
def registry_path(tmp_path: Path) -> Path:
    return write_registry(
        tmp_path / "deployments" / "addresses.json",
        {
            "bscTestnet-97": {
                "priceFeedAddress": PRICE_FEED_ADDRESS,
                "myMarketAddress": MARKET_ADDRESS,
            }
        },
    )
