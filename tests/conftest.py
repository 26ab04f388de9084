"""Shared pytest fixtures for the CryptoBlock test suite."""

from __future__ import annotations

from io import StringIO
from pathlib import Path
from typing import Callable, Dict, Iterable, List

import pytest
from rich.console import Console

from cryptoblock.commands import AppState, CommandDispatcher
from cryptoblock.context import CommandHistory
from cryptoblock.market import (
    CoinListing,
    CoinListingRepository,
    CoinTicker,
    DataRequestError,
    MarketConfig,
)
from cryptoblock.portfolio import PortfolioManager, PortfolioStorage
from cryptoblock.settings import SettingsManager
from cryptoblock.settings.profiles import DEBUGGING
from cryptoblock.ui import ConsoleOutput

LISTINGS = [
    CoinListing(id=1, name="Bitcoin", symbol="BTC", slug="bitcoin", rank=1),
    CoinListing(id=1027, name="Ethereum", symbol="ETH", slug="ethereum", rank=2),
    CoinListing(id=2, name="Litecoin", symbol="LTC", slug="litecoin", rank=15),
]


def make_ticker(listing: CoinListing, price: float) -> CoinTicker:
    return CoinTicker(
        id=listing.id,
        name=listing.name,
        symbol=listing.symbol,
        rank=listing.rank,
        price=price,
        volume_24h=1_000_000.0,
        market_cap=50_000_000.0,
        percent_change_1h=0.5,
        percent_change_24h=-1.25,
        percent_change_7d=3.0,
        circulating_supply=19_000_000.0,
        last_updated=None,
    )


class FakeMarketClient:
    """Stands in for MarketClient with canned data and no network."""

    def __init__(self) -> None:
        self.config = MarketConfig(api_key="test-key")
        self.connected = True
        self.fail = False
        self.listing_requests = 0
        self.ticker_requests: List[List[int]] = []
        self.tickers: Dict[int, CoinTicker] = {
            1: make_ticker(LISTINGS[0], 30000.0),
            1027: make_ticker(LISTINGS[1], 2000.0),
        }

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    async def fetch_listings(self) -> List[CoinListing]:
        self.listing_requests += 1
        if self.fail:
            raise DataRequestError("https://example.test/map", "connection refused")
        return list(LISTINGS)

    async def fetch_tickers(self, coin_ids: Iterable[int]) -> Dict[int, CoinTicker]:
        ids = sorted(set(coin_ids))
        self.ticker_requests.append(ids)
        if self.fail:
            raise DataRequestError("https://example.test/quotes", "connection refused")
        return {i: self.tickers[i] for i in ids if i in self.tickers}

    async def check_connectivity(self) -> bool:
        return self.connected

    async def close(self) -> None:
        pass


@pytest.fixture
def console() -> Console:
    """Console that records output in memory."""
    return Console(file=StringIO(), width=200, color_system=None, force_terminal=False)


@pytest.fixture
def output(console: Console, tmp_path: Path) -> ConsoleOutput:
    """Output sink that shows every report type."""
    return ConsoleOutput(console, profile=DEBUGGING, error_log_path=tmp_path / "error_log.jsonl")


@pytest.fixture
def market_client() -> FakeMarketClient:
    return FakeMarketClient()


@pytest.fixture
def state(tmp_path: Path, output: ConsoleOutput, market_client: FakeMarketClient) -> AppState:
    """AppState wired to temporary files and the fake market client."""
    return AppState(
        output=output,
        settings=SettingsManager(tmp_path / "settings.json"),
        portfolio=PortfolioManager(PortfolioStorage(tmp_path / "portfolio.json"), undo_depth=5),
        market_client=market_client,
        listings=CoinListingRepository(market_client),
        history=CommandHistory(tmp_path / "history.jsonl", capacity=10),
        data_dir=tmp_path,
    )


@pytest.fixture
def dispatcher(state: AppState) -> CommandDispatcher:
    """Dispatcher with the built-in registries."""
    return CommandDispatcher(state)


@pytest.fixture
def printed(console: Console) -> Callable[[], str]:
    """Return everything written to the recording console so far."""
    return lambda: console.file.getvalue()
