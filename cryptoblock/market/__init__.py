"""
Market data: CoinMarketCap client and coin listing cache
"""

from .client import (
    MarketClient,
    MarketConfig,
    CoinListing,
    CoinTicker,
    MarketDataError,
    DataRequestError,
    UnsuccessfulStatusError,
    ResponseParseError,
    CoinNotFoundError,
)
from .listings import CoinListingRepository

__all__ = [
    "MarketClient",
    "MarketConfig",
    "CoinListing",
    "CoinTicker",
    "MarketDataError",
    "DataRequestError",
    "UnsuccessfulStatusError",
    "ResponseParseError",
    "CoinNotFoundError",
    "CoinListingRepository",
]
