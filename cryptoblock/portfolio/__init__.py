"""
Portfolio bookkeeping for CryptoBlock
"""

from .storage import (
    PortfolioEntry,
    PortfolioError,
    PortfolioStorage,
    PortfolioStorageError,
    Transaction,
    TransactionType,
)
from .manager import (
    PortfolioManager,
    CoinAlreadyInPortfolioError,
    CoinNotInPortfolioError,
    InsufficientHoldingsError,
)

__all__ = [
    "PortfolioEntry",
    "PortfolioError",
    "PortfolioStorage",
    "PortfolioStorageError",
    "Transaction",
    "TransactionType",
    "PortfolioManager",
    "CoinAlreadyInPortfolioError",
    "CoinNotInPortfolioError",
    "InsufficientHoldingsError",
]
