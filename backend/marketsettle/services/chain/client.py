from __future__ import annotations

import asyncio
import logging
from typing import Any

from aiohttp import ClientError, ClientTimeout
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.contract import AsyncContract
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from marketsettle.config import NetworkContext, SettlementConfig

from .abi import MY_MARKET_ABI
from .config import ChainConfig
from .exceptions import (
    ChainAuthError,
    ChainQueryError,
    ReceiptTimeoutError,
    TransactionRefusedError,
)
from .models import TransactionReceipt

logger = logging.getLogger(__name__)

# Node-side JSON-RPC errors surface as ValueError.
_RPC_ERRORS = (Web3Exception, ClientError, asyncio.TimeoutError, OSError, ValueError)


class MarketContractClient:
    def __init__(self, config: ChainConfig, private_key: str | None = None):
        self.config = config
        self._w3: AsyncWeb3 | None = None
        self._contracts: dict[str, AsyncContract] = {}

        self.account: LocalAccount | None = None
        if private_key:
            try:
                self.account = Account.from_key(private_key)
            except Exception as e:
                raise ChainAuthError(f"Invalid signing key: {e}") from e

        logger.info(
            f"Initialized MarketContractClient (chain_id={self.config.chain_id}, "
            f"signer={self.account.address if self.account else 'none'})"
        )

    async def __aenter__(self) -> MarketContractClient:
        provider = AsyncHTTPProvider(
            self.config.rpc_url,
            request_kwargs={
                "timeout": ClientTimeout(total=self.config.request_timeout_seconds)
            },
        )
        self._w3 = AsyncWeb3(provider)
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._w3:
            await self._w3.provider.disconnect()
            self._w3 = None
            self._contracts.clear()
            logger.info("Closed MarketContractClient")

    @property
    def w3(self) -> AsyncWeb3:
        if self._w3 is None:
            raise RuntimeError(
                "MarketContractClient must be used as async context manager"
            )
        return self._w3

    def _require_signer(self) -> LocalAccount:
        if self.account is None:
            raise ChainAuthError(
                "Signing key required. Set EVM_PRIVATE_KEY to submit transactions."
            )
        return self.account

    def _contract(self, market_address: str) -> AsyncContract:
        contract = self._contracts.get(market_address)
        if contract is None:
            contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(market_address),
                abi=MY_MARKET_ABI,
            )
            self._contracts[market_address] = contract
        return contract

    async def _call(self, market_address: str, function_name: str) -> Any:
        contract = self._contract(market_address)
        try:
            return await contract.functions[function_name]().call()
        except _RPC_ERRORS as e:
            raise ChainQueryError(
                f"{function_name}() failed on {market_address}: {e}"
            ) from e

    async def has_expired(self, market_address: str) -> bool:
        return bool(await self._call(market_address, "hasExpired"))

    async def is_settled(self, market_address: str) -> bool:
        return bool(await self._call(market_address, "isSettled"))

    async def time_until_expiry(self, market_address: str) -> int:
        return int(await self._call(market_address, "timeUntilExpiry"))

    async def strike_price(self, market_address: str) -> int:
        return int(await self._call(market_address, "STRIKE_PRICE"))

    async def settlement_price(self, market_address: str) -> int:
        return int(await self._call(market_address, "settlementPrice"))

    async def settled_above_strike(self, market_address: str) -> bool:
        return bool(await self._call(market_address, "settledAboveStrike"))

    async def answer_timestamp(self, market_address: str) -> int:
        return int(await self._call(market_address, "answerTimestamp"))

    async def send_settle_market(self, market_address: str) -> str:
        account = self._require_signer()
        contract = self._contract(market_address)

        try:
            nonce = await self.w3.eth.get_transaction_count(account.address, "pending")
            tx = await contract.functions.settleMarket().build_transaction(
                {
                    "from": account.address,
                    "nonce": nonce,
                    "chainId": self.config.chain_id,
                }
            )
        except ContractLogicError as e:
            raise TransactionRefusedError(f"settleMarket() would revert: {e}") from e
        except _RPC_ERRORS as e:
            raise ChainQueryError(f"Failed to prepare settleMarket(): {e}") from e

        signed = account.sign_transaction(tx)
        local_hash = Web3.to_hex(signed.hash)

        try:
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (ClientError, asyncio.TimeoutError, OSError) as e:
            # The node may or may not have accepted it before the connection dropped.
            raise ReceiptTimeoutError(
                f"Lost connection while submitting {local_hash}: {e}",
                tx_hash=local_hash,
            ) from e
        except (Web3Exception, ValueError) as e:
            raise TransactionRefusedError(f"Node rejected settleMarket(): {e}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(f"Submitted settleMarket() to {market_address}: {tx_hash_hex}")
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TransactionReceipt:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=timeout,
                poll_latency=self.config.receipt_poll_seconds,
            )
        except TimeExhausted as e:
            raise ReceiptTimeoutError(
                f"No receipt for {tx_hash} after {timeout:.0f}s", tx_hash=tx_hash
            ) from e
        except _RPC_ERRORS as e:
            raise ReceiptTimeoutError(
                f"Receipt lookup for {tx_hash} failed: {e}", tx_hash=tx_hash
            ) from e

        return TransactionReceipt.from_web3(receipt)


def create_market_client(
    context: NetworkContext,
    settlement: SettlementConfig | None = None,
) -> MarketContractClient:
    """Build a client for the network described by ``context``."""
    settlement = settlement or SettlementConfig()
    config = ChainConfig(
        rpc_url=context.rpc_url,
        chain_id=context.chain_id,
        request_timeout_seconds=settlement.request_timeout_seconds,
        receipt_poll_seconds=settlement.receipt_poll_seconds,
    )
    return MarketContractClient(config, private_key=context.private_key or None)
