"""Result reporting: market snapshot to settlement outcome."""

from marketsettle.services.chain import TransactionReceipt

from .exceptions import InvalidStateError
from .models import MarketState, SettlementOutcome


def build_outcome(
    network_key: str,
    market_address: str,
    state: MarketState | None,
    receipt: TransactionReceipt | None = None,
) -> SettlementOutcome:
    """Assemble the outcome for a settled market.

    ``receipt`` is given only when this run submitted the settlement, which is
    also what decides ``already_settled``.
    """
    if state is None:
        raise InvalidStateError("No market snapshot to report on")
    if not state.is_settled:
        raise InvalidStateError(
            f"Market {market_address} is not settled; nothing to report"
        )

    return SettlementOutcome(
        network_key=network_key,
        market_address=market_address,
        already_settled=receipt is None,
        settlement_price=state.settlement_price,
        strike_price=state.strike_price,
        settled_above_strike=state.settled_above_strike,
        answer_timestamp=state.answer_timestamp,
        transaction_hash=receipt.transaction_hash if receipt else None,
        gas_used=receipt.gas_used if receipt else None,
        block_number=receipt.block_number if receipt else None,
    )
