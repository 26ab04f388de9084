"""Tests for market data: client parsing, listing cache and commands."""

from __future__ import annotations

import asyncio

import pytest

from cryptoblock.commands import DispatchStatus
from cryptoblock.market import (
    CoinListing,
    CoinListingRepository,
    CoinNotFoundError,
    CoinTicker,
    DataRequestError,
    MarketClient,
    MarketConfig,
)

# Nothing listens on the discard port locally
UNREACHABLE = "http://127.0.0.1:9"


def dispatch(dispatcher, line: str):
    return asyncio.run(dispatcher.dispatch(line))


class TestMarketConfig:
    def test_environment_overrides_file(self, monkeypatch) -> None:
        monkeypatch.setenv("CMC_API_KEY", "from-env")
        monkeypatch.delenv("CMC_BASE_URL", raising=False)
        monkeypatch.delenv("CMC_CURRENCY", raising=False)
        monkeypatch.delenv("CMC_TIMEOUT", raising=False)

        config = MarketConfig.from_env({"cmc_api_key": "from-file", "cmc_timeout": 5})

        assert config.api_key == "from-env"
        assert config.timeout == 5
        assert config.base_url == "https://pro-api.coinmarketcap.com"
        assert config.currency == "USD"


class TestParsing:
    def test_listing_from_dict(self) -> None:
        listing = CoinListing.from_dict(
            {"id": 1, "name": "Bitcoin", "symbol": "BTC", "slug": "bitcoin", "rank": 1}
        )
        assert listing == CoinListing(1, "Bitcoin", "BTC", "bitcoin", 1)

    def test_ticker_from_dict(self) -> None:
        ticker = CoinTicker.from_dict(
            {
                "id": 1027,
                "name": "Ethereum",
                "symbol": "ETH",
                "cmc_rank": 2,
                "circulating_supply": 120000000,
                "quote": {
                    "USD": {
                        "price": 2012.5,
                        "volume_24h": 1.5e10,
                        "market_cap": 2.4e11,
                        "percent_change_1h": -0.2,
                        "percent_change_24h": 1.1,
                        "percent_change_7d": 4.0,
                        "last_updated": "2024-01-01T00:00:00.000Z",
                    }
                },
            },
            "USD",
        )
        assert ticker.rank == 2
        assert ticker.price == 2012.5
        assert ticker.percent_change_1h == -0.2
        assert ticker.last_updated.year == 2024


class TestClientErrors:
    def test_connection_refused_is_data_request_error(self) -> None:
        async def scenario():
            client = MarketClient(MarketConfig(api_key="k", base_url=UNREACHABLE, timeout=5))
            try:
                await client.fetch_listings()
            finally:
                await client.close()

        with pytest.raises(DataRequestError):
            asyncio.run(scenario())

    def test_connectivity_check_reports_false(self) -> None:
        async def scenario() -> bool:
            client = MarketClient(MarketConfig(api_key="k"))
            try:
                return await client.check_connectivity(UNREACHABLE, timeout=2)
            finally:
                await client.close()

        assert asyncio.run(scenario()) is False

    def test_fetch_tickers_without_ids_makes_no_request(self) -> None:
        client = MarketClient(MarketConfig(api_key="k", base_url=UNREACHABLE))
        assert asyncio.run(client.fetch_tickers([])) == {}


class TestCoinListingRepository:
    def test_loads_once(self, market_client) -> None:
        repository = CoinListingRepository(market_client)
        asyncio.run(repository.ensure_loaded())
        asyncio.run(repository.ensure_loaded())
        assert market_client.listing_requests == 1
        assert repository.initialized
        assert len(repository) == 3

    def test_resolve_by_name_symbol_or_slug(self, market_client) -> None:
        repository = CoinListingRepository(market_client)
        asyncio.run(repository.refresh())
        assert repository.resolve("BITCOIN").id == 1
        assert repository.resolve("eth").id == 1027
        assert repository.resolve("litecoin").symbol == "LTC"

    def test_unknown_coin(self, market_client) -> None:
        repository = CoinListingRepository(market_client)
        asyncio.run(repository.refresh())
        with pytest.raises(CoinNotFoundError, match="Coin 'dogecoin' does not exist."):
            repository.resolve("dogecoin")

    def test_resolve_all_drops_repeats(self, market_client) -> None:
        repository = CoinListingRepository(market_client)
        asyncio.run(repository.refresh())
        assert [c.id for c in repository.resolve_all(["btc", "bitcoin", "eth"])] == [1, 1027]

    def test_symbol_collision_prefers_better_rank(self, market_client) -> None:
        repository = CoinListingRepository(market_client)
        repository.load([
            CoinListing(id=99, name="Bitcoin Copy", symbol="BTC", rank=900),
            CoinListing(id=1, name="Bitcoin", symbol="BTC", rank=1),
        ])
        assert repository.resolve("btc").id == 1


class TestMarketCommands:
    def test_listing(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "listing btc eth")
        assert result.status == DispatchStatus.SUCCESS
        out = printed()
        assert "Bitcoin" in out
        assert "1027" in out

    def test_ticker(self, dispatcher, market_client, printed) -> None:
        result = dispatch(dispatcher, "ticker bitcoin ETH")

        assert result.status == DispatchStatus.SUCCESS
        assert market_client.ticker_requests == [[1, 1027]]
        out = printed()
        assert "30,000.00" in out
        assert "-1.25%" in out

    def test_ticker_partial_data_warns(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "ticker btc ltc")
        assert result.status == DispatchStatus.SUCCESS
        assert "No market data available for 'Litecoin'." in printed()

    def test_ticker_without_any_data_fails(self, dispatcher) -> None:
        assert dispatch(dispatcher, "ticker ltc").status == DispatchStatus.EXECUTION_FAILED

    def test_unknown_coin(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "ticker dogecoin")
        assert result.status == DispatchStatus.EXECUTION_FAILED
        assert "Coin 'dogecoin' does not exist." in printed()

    def test_network_failure(self, dispatcher, market_client, printed) -> None:
        market_client.fail = True
        result = dispatch(dispatcher, "listing btc")
        assert result.status == DispatchStatus.EXECUTION_FAILED
        assert "connection refused" in printed()

    def test_requires_a_coin(self, dispatcher) -> None:
        assert dispatch(dispatcher, "ticker").status == DispatchStatus.INVALID_ARGUMENTS
