"""
Settlement Exception Hierarchy

Every failure a settlement run can end in. Each kind names the step that
raised it and maps to its own process exit code so wrapping scripts can branch
on the kind without parsing messages.

Kind                      Step      Exit
NoDeploymentRegistry      resolve   10
NoDeploymentForNetwork    resolve   11
MarketNotDeployed         resolve   12
InvalidDeploymentRecord   resolve   13
MarketNotExpired          evaluate  20
ChainQueryFailed          *         30
TransactionRejected       invoke    40
ReceiptUnavailable        invoke    41
InvalidState              report    50

None of these are retried inside the orchestrator.
"""

from datetime import datetime, timezone
from typing import Any


class SettlementError(Exception):
    """Base exception for all settlement failures"""

    kind: str = "SettlementFailed"
    step: str = "settle"
    exit_code: int = 1

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.message = message
        if step is not None:
            self.step = step

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "failed",
            "step": self.step,
            "kind": self.kind,
            "message": self.message,
        }


def _with_transaction(
    payload: dict[str, Any], tx_hash: str | None, gas_used: int | None
) -> dict[str, Any]:
    # tx_hash is set only when this run confirmed a settlement
    if tx_hash is None:
        return payload
    return {**payload, "transaction_hash": tx_hash, "gas_used": gas_used}


class DeploymentError(SettlementError):
    """Raised when the deployment registry cannot yield a market address"""

    step = "resolve"


class NoDeploymentRegistryError(DeploymentError):
    kind = "NoDeploymentRegistry"
    exit_code = 10


class NoDeploymentForNetworkError(DeploymentError):
    kind = "NoDeploymentForNetwork"
    exit_code = 11

    def __init__(self, message: str, network_key: str):
        super().__init__(message)
        self.network_key = network_key


class MarketNotDeployedError(DeploymentError):
    kind = "MarketNotDeployed"
    exit_code = 12


class InvalidDeploymentRecordError(DeploymentError):
    kind = "InvalidDeploymentRecord"
    exit_code = 13


class MarketNotExpiredError(SettlementError):
    """Raised when settlement is attempted before expiry.

    Expected when invoked too early; not an infrastructure fault.
    """

    kind = "MarketNotExpired"
    step = "evaluate"
    exit_code = 20

    def __init__(self, seconds_remaining: int, observed_at: datetime | None = None):
        self.seconds_remaining = seconds_remaining
        self.observed_at = observed_at or datetime.now(timezone.utc)
        super().__init__(
            f"Market has not expired yet. Expires in {seconds_remaining} seconds "
            f"({self.expires_at:%a, %d %b %Y %H:%M:%S} UTC)"
        )

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(
            self.observed_at.timestamp() + self.seconds_remaining, tz=timezone.utc
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "not_expired",
            "step": self.step,
            "kind": self.kind,
            "message": self.message,
            "seconds_remaining": self.seconds_remaining,
            "expires_at": self.expires_at.isoformat(),
        }


class ChainQueryFailedError(SettlementError):
    """Raised when a chain read fails. Safe to retry from outside."""

    kind = "ChainQueryFailed"
    step = "evaluate"
    exit_code = 30

    def __init__(
        self,
        message: str,
        step: str | None = None,
        tx_hash: str | None = None,
        gas_used: int | None = None,
    ):
        super().__init__(message, step=step)
        self.tx_hash = tx_hash
        self.gas_used = gas_used

    def to_dict(self) -> dict[str, Any]:
        return _with_transaction(super().to_dict(), self.tx_hash, self.gas_used)


class TransactionRejectedError(SettlementError):
    """Raised when the network refuses or reverts the settlement transaction.

    Commonly another actor settled first; re-query the market.
    """

    kind = "TransactionRejected"
    step = "invoke"
    exit_code = 40

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "transaction_hash": self.tx_hash}


class ReceiptUnavailableError(SettlementError):
    """Raised when a submitted transaction cannot be confirmed.

    The settlement may or may not have happened; callers must not assume
    either.
    """

    kind = "ReceiptUnavailable"
    step = "invoke"
    exit_code = 41

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "status": "unknown",
            "transaction_hash": self.tx_hash,
        }


class InvalidStateError(SettlementError):
    """Raised when a market snapshot is missing fields the report needs"""

    kind = "InvalidState"
    step = "report"
    exit_code = 50

    def __init__(
        self,
        message: str,
        step: str | None = None,
        tx_hash: str | None = None,
        gas_used: int | None = None,
    ):
        super().__init__(message, step=step)
        self.tx_hash = tx_hash
        self.gas_used = gas_used

    def to_dict(self) -> dict[str, Any]:
        return _with_transaction(super().to_dict(), self.tx_hash, self.gas_used)
