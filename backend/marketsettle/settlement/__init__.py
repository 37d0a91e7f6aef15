"""
Settlement Orchestrator

Settles a binary strike-price market exactly once:

1. Resolve   - network key to deployed market address (registry only)
2. Evaluate  - expired? already settled?
3. Invoke    - submit settleMarket() and wait for the receipt
4. Report    - build the outcome from the settled on-chain state

Runs are stateless. Concurrent runs against the same market rely on the
contract accepting a single settlement; the loser sees TransactionRejected.
"""

from .exceptions import (
    ChainQueryFailedError,
    DeploymentError,
    InvalidDeploymentRecordError,
    InvalidStateError,
    MarketNotDeployedError,
    MarketNotExpiredError,
    NoDeploymentForNetworkError,
    NoDeploymentRegistryError,
    ReceiptUnavailableError,
    SettlementError,
    TransactionRejectedError,
)
from .main import check_market, inspect_market, run_settlement, settle_market
from .models import MarketPhase, MarketState, MarketStatus, SettlementOutcome, Verdict

__all__ = [
    "run_settlement",
    "settle_market",
    "inspect_market",
    "check_market",
    "MarketPhase",
    "MarketState",
    "MarketStatus",
    "SettlementOutcome",
    "Verdict",
    "SettlementError",
    "DeploymentError",
    "NoDeploymentRegistryError",
    "NoDeploymentForNetworkError",
    "MarketNotDeployedError",
    "InvalidDeploymentRecordError",
    "MarketNotExpiredError",
    "ChainQueryFailedError",
    "TransactionRejectedError",
    "ReceiptUnavailableError",
    "InvalidStateError",
]
