class ChainError(Exception):
    """Base exception for market contract client errors."""

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ChainQueryError(ChainError):
    """A read call or RPC request failed (node unreachable, malformed response)."""

    pass


class ChainAuthError(ChainError):
    """No usable signing key for a state-mutating call."""

    pass


class TransactionRefusedError(ChainError):
    """The node refused the transaction or it was mined and reverted."""

    pass


class ReceiptTimeoutError(ChainError):
    """No confirmation receipt within the wait window. Outcome unknown."""

    pass
