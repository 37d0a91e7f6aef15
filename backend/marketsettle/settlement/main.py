"""Settlement orchestration: Resolve -> Evaluate -> (Invoke) -> Report."""

import logging
from pathlib import Path

from marketsettle.config import NetworkContext, Settings
from marketsettle.services.chain import (
    ChainQueryError,
    MarketClient,
    MarketReader,
    create_market_client,
)

from .evaluator import evaluate_preconditions, read_market_state
from .exceptions import ChainQueryFailedError, InvalidStateError
from .invoker import invoke_settlement
from .models import MarketPhase, MarketStatus, SettlementOutcome
from .reporter import build_outcome
from .resolver import resolve_market_address

logger = logging.getLogger(__name__)


async def run_settlement(
    context: NetworkContext,
    client: MarketClient,
    registry_path: Path,
    receipt_timeout: float = 120.0,
) -> SettlementOutcome:
    """Settle the market deployed on ``context``'s network, or report it if already settled.

    Safe to call repeatedly: once the market is settled every call reports the
    same outcome without submitting anything.
    """
    network_key = context.network_key
    market_address = resolve_market_address(context, registry_path)

    verdict = await evaluate_preconditions(client, market_address)

    if verdict.phase == MarketPhase.EXPIRED_SETTLED:
        logger.warning(f"Market {market_address} is already settled")
        return build_outcome(network_key, market_address, verdict.state)

    if verdict.phase == MarketPhase.EXPIRED_UNSETTLED:
        logger.info(f"Settling market {market_address} on {network_key}...")
        receipt = await invoke_settlement(client, market_address, receipt_timeout)
        try:
            state = await read_market_state(client, market_address, step="report")
            return build_outcome(network_key, market_address, state, receipt)
        except (ChainQueryFailedError, InvalidStateError) as e:
            logger.error(
                f"Market {market_address} settled in {receipt.transaction_hash} "
                f"but the outcome could not be read: {e}"
            )
            e.tx_hash = receipt.transaction_hash
            e.gas_used = receipt.gas_used
            raise

    raise InvalidStateError(f"Unhandled market phase: {verdict.phase}", step="evaluate")


async def inspect_market(
    context: NetworkContext,
    reader: MarketReader,
    registry_path: Path,
) -> MarketStatus:
    """Resolve and read the market without ever submitting a transaction."""
    market_address = resolve_market_address(context, registry_path)
    state = await read_market_state(reader, market_address)

    seconds_until_expiry = 0
    if not state.has_expired:
        try:
            seconds_until_expiry = await reader.time_until_expiry(market_address)
        except ChainQueryError as e:
            raise ChainQueryFailedError(str(e), step="evaluate") from e

    return MarketStatus(
        network_key=context.network_key,
        market_address=market_address,
        seconds_until_expiry=seconds_until_expiry,
        state=state,
    )


async def settle_market(context: NetworkContext, settings: Settings) -> SettlementOutcome:
    """Run a settlement against the live network described by ``context``."""
    async with create_market_client(context, settings.settlement) as client:
        return await run_settlement(
            context,
            client,
            settings.deployments_path,
            receipt_timeout=settings.settlement.receipt_timeout_seconds,
        )


async def check_market(context: NetworkContext, settings: Settings) -> MarketStatus:
    """Read-only status of the live market described by ``context``."""
    async with create_market_client(context, settings.settlement) as client:
        return await inspect_market(context, client, settings.deployments_path)
