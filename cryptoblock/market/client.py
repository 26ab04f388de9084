"""
CoinMarketCap API Client

Async client for the coin listing map and latest quotes, plus the
internet connectivity probe used by "status connection".
"""

import os
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any, List, Iterable

import aiohttp


CONNECTIVITY_URL = "http://clients3.google.com/generate_204"
CONNECTIVITY_TIMEOUT = 10


class MarketDataError(Exception):
    """Base class for market data errors."""


class DataRequestError(MarketDataError):
    """The request could not be completed (network failure or timeout)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Request to '{url}' failed: {reason}")
        self.url = url
        self.reason = reason


class UnsuccessfulStatusError(MarketDataError):
    """The server answered with a non-success status."""

    def __init__(self, url: str, status: int, detail: str = ""):
        message = f"Request to '{url}' returned status {status}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.url = url
        self.status = status


class ResponseParseError(MarketDataError):
    """The server response did not have the expected shape."""


class CoinNotFoundError(MarketDataError):
    def __init__(self, name: str):
        super().__init__(f"Coin '{name}' does not exist.")
        self.name = name


@dataclass
class MarketConfig:
    """CoinMarketCap API configuration."""
    api_key: str = ""
    base_url: str = "https://pro-api.coinmarketcap.com"
    currency: str = "USD"
    timeout: int = 15

    @classmethod
    def from_env(cls, config: Optional[Dict[str, Any]] = None) -> "MarketConfig":
        """Build from the JSON config dict, overridden by environment variables."""
        config = config or {}
        return cls(
            api_key=os.getenv("CMC_API_KEY") or config.get("cmc_api_key", ""),
            base_url=os.getenv("CMC_BASE_URL") or config.get("cmc_base_url", cls.base_url),
            currency=os.getenv("CMC_CURRENCY") or config.get("currency", cls.currency),
            timeout=int(os.getenv("CMC_TIMEOUT") or config.get("cmc_timeout", cls.timeout)),
        )


@dataclass
class CoinListing:
    """Static identity of a coin."""
    id: int
    name: str
    symbol: str
    slug: str = ""
    rank: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CoinListing":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            symbol=data["symbol"],
            slug=data.get("slug", ""),
            rank=data.get("rank"),
        )


@dataclass
class CoinTicker:
    """Latest market data for one coin."""
    id: int
    name: str
    symbol: str
    rank: Optional[int]
    price: float
    volume_24h: Optional[float]
    market_cap: Optional[float]
    percent_change_1h: Optional[float]
    percent_change_24h: Optional[float]
    percent_change_7d: Optional[float]
    circulating_supply: Optional[float]
    last_updated: Optional[datetime]

    @classmethod
    def from_dict(cls, data: dict, currency: str) -> "CoinTicker":
        quote = data["quote"][currency]
        last_updated = quote.get("last_updated")
        return cls(
            id=int(data["id"]),
            name=data["name"],
            symbol=data["symbol"],
            rank=data.get("cmc_rank"),
            price=float(quote["price"]),
            volume_24h=quote.get("volume_24h"),
            market_cap=quote.get("market_cap"),
            percent_change_1h=quote.get("percent_change_1h"),
            percent_change_24h=quote.get("percent_change_24h"),
            percent_change_7d=quote.get("percent_change_7d"),
            circulating_supply=data.get("circulating_supply"),
            last_updated=(
                datetime.fromisoformat(last_updated.replace("Z", "+00:00"))
                if last_updated else None
            ),
        )


class MarketClient:
    """
    Async client for the CoinMarketCap API.

    Network failures are raised as MarketDataError subclasses; no retries
    are attempted.
    """

    def __init__(self, config: Optional[MarketConfig] = None):
        self.config = config or MarketConfig.from_env()
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return bool(self.config.api_key)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            )
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self.config.base_url.rstrip('/')}{path}"
        headers = {
            "Accept": "application/json",
            "X-CMC_PRO_API_KEY": self.config.api_key,
        }

        session = await self._get_session()
        try:
            async with session.get(url, headers=headers, params=params) as response:
                if response.status != 200:
                    detail = ""
                    try:
                        body = await response.json(content_type=None)
                        detail = (body.get("status") or {}).get("error_message") or ""
                    except (aiohttp.ContentTypeError, ValueError, AttributeError):
                        pass
                    raise UnsuccessfulStatusError(url, response.status, detail)

                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    raise ResponseParseError(f"Response from '{url}' is not valid JSON") from e
        except asyncio.TimeoutError as e:
            raise DataRequestError(url, "timed out") from e
        except aiohttp.ClientError as e:
            raise DataRequestError(url, str(e)) from e

        if not isinstance(body, dict) or "data" not in body:
            raise ResponseParseError(f"Response from '{url}' has no 'data' field")
        return body["data"]

    async def fetch_listings(self) -> List[CoinListing]:
        """Fetch the id/name/symbol map of all active coins."""
        data = await self._get_json("/v1/cryptocurrency/map", {"listing_status": "active"})
        try:
            return [CoinListing.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseParseError(f"Unexpected listing format: {e}") from e

    async def fetch_tickers(self, coin_ids: Iterable[int]) -> Dict[int, CoinTicker]:
        """Fetch latest quotes for the given coin ids."""
        ids = sorted(set(coin_ids))
        if not ids:
            return {}

        data = await self._get_json(
            "/v1/cryptocurrency/quotes/latest",
            {"id": ",".join(str(i) for i in ids), "convert": self.config.currency},
        )
        try:
            tickers = [CoinTicker.from_dict(item, self.config.currency) for item in data.values()]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ResponseParseError(f"Unexpected ticker format: {e}") from e
        return {ticker.id: ticker for ticker in tickers}

    async def check_connectivity(
        self,
        url: str = CONNECTIVITY_URL,
        timeout: float = CONNECTIVITY_TIMEOUT,
    ) -> bool:
        """Return True if ``url`` answers with a success status within ``timeout`` seconds."""
        session = await self._get_session()
        try:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
                return response.status < 400
        except (asyncio.TimeoutError, aiohttp.ClientError):
            return False
