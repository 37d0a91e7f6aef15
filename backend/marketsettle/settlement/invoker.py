"""Settlement invocation: submit ``settleMarket()`` and wait for confirmation."""

import logging

from marketsettle.services.chain import (
    ChainQueryError,
    MarketWriter,
    ReceiptTimeoutError,
    TransactionReceipt,
    TransactionRefusedError,
)

from .exceptions import (
    ChainQueryFailedError,
    ReceiptUnavailableError,
    TransactionRejectedError,
)

logger = logging.getLogger(__name__)


async def submit_settlement(writer: MarketWriter, market_address: str) -> str:
    """Submit the settlement transaction; returns its hash once the node accepts it."""
    try:
        tx_hash = await writer.send_settle_market(market_address)
    except TransactionRefusedError as e:
        raise TransactionRejectedError(str(e), tx_hash=e.tx_hash) from e
    except ReceiptTimeoutError as e:
        raise ReceiptUnavailableError(str(e), tx_hash=e.tx_hash) from e
    except ChainQueryError as e:
        raise ChainQueryFailedError(str(e), step="invoke") from e

    logger.info(f"Transaction hash: {tx_hash}")
    return tx_hash


async def confirm_settlement(
    writer: MarketWriter,
    tx_hash: str,
    timeout: float,
) -> TransactionReceipt:
    """Wait up to ``timeout`` seconds for the receipt of ``tx_hash``."""
    try:
        receipt = await writer.wait_for_receipt(tx_hash, timeout)
    except ReceiptTimeoutError as e:
        logger.warning(f"Settlement {tx_hash} unconfirmed: {e}")
        raise ReceiptUnavailableError(str(e), tx_hash=tx_hash) from e

    if not receipt.succeeded:
        raise TransactionRejectedError(
            f"Settlement transaction {tx_hash} reverted in block {receipt.block_number}",
            tx_hash=tx_hash,
        )

    logger.info(f"Market settled! Gas used: {receipt.gas_used}")
    return receipt


async def invoke_settlement(
    writer: MarketWriter,
    market_address: str,
    timeout: float,
) -> TransactionReceipt:
    tx_hash = await submit_settlement(writer, market_address)
    return await confirm_settlement(writer, tx_hash, timeout)
