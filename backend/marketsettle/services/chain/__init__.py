from .client import MarketContractClient, create_market_client
from .config import ChainConfig
from .exceptions import (
    ChainAuthError,
    ChainError,
    ChainQueryError,
    ReceiptTimeoutError,
    TransactionRefusedError,
)
from .interfaces import MarketClient, MarketReader, MarketWriter
from .models import TransactionReceipt

__all__ = [
    "MarketContractClient",
    "create_market_client",
    "ChainConfig",
    "ChainError",
    "ChainAuthError",
    "ChainQueryError",
    "ReceiptTimeoutError",
    "TransactionRefusedError",
    "MarketClient",
    "MarketReader",
    "MarketWriter",
    "TransactionReceipt",
]
