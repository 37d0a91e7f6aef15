"""Precondition evaluation: is settlement legal, and has it already happened."""

import logging

from pydantic import ValidationError

from marketsettle.services.chain import ChainQueryError, MarketReader

from .exceptions import ChainQueryFailedError, InvalidStateError, MarketNotExpiredError
from .models import MarketPhase, MarketState, Verdict, classify_phase

logger = logging.getLogger(__name__)


async def read_market_state(
    reader: MarketReader,
    market_address: str,
    step: str = "evaluate",
) -> MarketState:
    """Read a full snapshot; settlement fields are queried only if settled."""
    try:
        has_expired = await reader.has_expired(market_address)
        is_settled = await reader.is_settled(market_address)
    except ChainQueryError as e:
        raise ChainQueryFailedError(str(e), step=step) from e

    return await _complete_state(reader, market_address, has_expired, is_settled, step)


async def _complete_state(
    reader: MarketReader,
    market_address: str,
    has_expired: bool,
    is_settled: bool,
    step: str,
) -> MarketState:
    """Fill in the price fields for flags that were already read."""
    try:
        strike_price = await reader.strike_price(market_address)

        settlement: dict[str, object] = {}
        if is_settled:
            settlement = {
                "settlement_price": await reader.settlement_price(market_address),
                "settled_above_strike": await reader.settled_above_strike(market_address),
                "answer_timestamp": await reader.answer_timestamp(market_address),
            }
    except ChainQueryError as e:
        raise ChainQueryFailedError(str(e), step=step) from e

    try:
        return MarketState(
            has_expired=has_expired,
            is_settled=is_settled,
            strike_price=strike_price,
            **settlement,
        )
    except ValidationError as e:
        raise InvalidStateError(f"Inconsistent market snapshot: {e}", step=step) from e


async def evaluate_preconditions(reader: MarketReader, market_address: str) -> Verdict:
    """Decide whether ``market_address`` needs settling.

    Raises:
        MarketNotExpiredError: The market is still open; carries the wait.
        ChainQueryFailedError: Any read failed.
    """
    try:
        has_expired = await reader.has_expired(market_address)
        if not has_expired:
            seconds_remaining = await reader.time_until_expiry(market_address)
            raise MarketNotExpiredError(seconds_remaining)
        is_settled = await reader.is_settled(market_address)
    except ChainQueryError as e:
        raise ChainQueryFailedError(str(e), step="evaluate") from e

    phase = classify_phase(has_expired, is_settled)
    logger.info(f"Market {market_address} phase: {phase}")

    if phase == MarketPhase.EXPIRED_SETTLED:
        state = await _complete_state(
            reader, market_address, has_expired, is_settled, step="evaluate"
        )
        return Verdict(phase=phase, state=state)

    return Verdict(phase=phase)
