from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from web3 import Web3


class TransactionReceipt(BaseModel):
    transaction_hash: str
    gas_used: int
    block_number: int | None = None
    status: int = 1

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_web3(cls, receipt: Mapping[str, Any]) -> TransactionReceipt:
        return cls(
            transaction_hash=Web3.to_hex(receipt["transactionHash"]),
            gas_used=int(receipt["gasUsed"]),
            block_number=receipt.get("blockNumber"),
            status=int(receipt.get("status", 1)),
        )
