"""
Market Data Commands

Handles CoinMarketCap lookups:
- listing <coins...> - Show id, name, symbol and rank
- ticker <coins...> - Show latest price and market data
"""

from typing import List, Optional

from rich.table import Table
from rich.box import ROUNDED

from cryptoblock.market import CoinListing, MarketDataError
from cryptoblock.ui.styles import COLORS, change_color
from .arguments import ArgumentCountConstraint
from .base import Command, Prefix

MARKET_LABEL = "Market"

MAX_COINS_PER_REQUEST = 20


def format_number(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:,.{decimals}f}"


def format_price(value: Optional[float]) -> str:
    if value is None:
        return "-"
    # Sub-dollar coins need more precision
    return format_number(value, 2 if value >= 1 else 6)


def format_change(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"[{change_color(value)}]{value:+.2f}%[/{change_color(value)}]"


class CoinCommand(Command):
    """Base for commands that take coin names or symbols."""

    async def resolve_coins(self, names: List[str]) -> Optional[List[CoinListing]]:
        """Resolve names to listings, printing the reason and returning None on failure."""
        listings = self.state.listings
        try:
            await listings.ensure_loaded()
            return listings.resolve_all(names)
        except MarketDataError as e:
            self.output.error(str(e))
            return None


class ListingCommand(CoinCommand):
    """Handles listing command - show coin identity."""

    prefix = Prefix("listing")
    constraints = (ArgumentCountConstraint(1, MAX_COINS_PER_REQUEST),)
    usage = "<coins...>"
    description = "Show coin id, name, symbol and rank"

    async def execute(self, arguments: List[str]) -> bool:
        coins = await self.resolve_coins(arguments)
        if coins is None:
            return False

        table = Table(title="Coin Listings", box=ROUNDED, border_style=COLORS["primary"])
        table.add_column("ID", justify="right", style="dim")
        table.add_column("Name", style=COLORS["secondary"])
        table.add_column("Symbol")
        table.add_column("Rank", justify="right")
        for coin in coins:
            table.add_row(
                str(coin.id),
                coin.name,
                coin.symbol,
                str(coin.rank) if coin.rank is not None else "-",
            )

        self.output.data(table)
        return True


class TickerCommand(CoinCommand):
    """Handles ticker command - show latest market data."""

    prefix = Prefix("ticker")
    constraints = (ArgumentCountConstraint(1, MAX_COINS_PER_REQUEST),)
    usage = "<coins...>"
    description = "Show latest price, volume and changes"

    async def execute(self, arguments: List[str]) -> bool:
        coins = await self.resolve_coins(arguments)
        if coins is None:
            return False

        try:
            tickers = await self.state.market_client.fetch_tickers(coin.id for coin in coins)
        except MarketDataError as e:
            self.output.error(str(e))
            return False

        currency = self.state.market_client.config.currency
        table = Table(title=f"Ticker ({currency})", box=ROUNDED, border_style=COLORS["primary"])
        table.add_column("Rank", justify="right", style="dim")
        table.add_column("Name", style=COLORS["secondary"])
        table.add_column("Symbol")
        table.add_column("Price", justify="right")
        table.add_column("1h", justify="right")
        table.add_column("24h", justify="right")
        table.add_column("7d", justify="right")
        table.add_column("Volume 24h", justify="right")
        table.add_column("Market Cap", justify="right")

        missing = []
        for coin in coins:
            ticker = tickers.get(coin.id)
            if ticker is None:
                missing.append(coin.name)
                continue
            table.add_row(
                str(ticker.rank) if ticker.rank is not None else "-",
                ticker.name,
                ticker.symbol,
                format_price(ticker.price),
                format_change(ticker.percent_change_1h),
                format_change(ticker.percent_change_24h),
                format_change(ticker.percent_change_7d),
                format_number(ticker.volume_24h, 0),
                format_number(ticker.market_cap, 0),
            )

        if len(missing) == len(coins):
            self.output.error(f"No market data available for {', '.join(missing)}.")
            return False

        self.output.data(table)
        for name in missing:
            self.output.warning(f"No market data available for '{name}'.")
        return True


MARKET_COMMANDS = [
    ListingCommand,
    TickerCommand,
]
