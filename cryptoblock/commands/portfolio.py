"""
Portfolio Commands

Handles portfolio bookkeeping:
- portfolio view [coins...] - Show entries
- portfolio add|remove <coins...> - Track or stop tracking coins
- portfolio clear - Remove all entries
- portfolio buy|sell <coin> <amount> <price> [...] - Record transactions
- portfolio undo - Revert the last portfolio change
"""

from typing import List, Optional, Tuple

from rich.table import Table
from rich.box import ROUNDED

from cryptoblock.market import CoinListing, MarketDataError
from cryptoblock.portfolio import InsufficientHoldingsError, PortfolioError
from cryptoblock.ui.components import ConfirmPrompt
from cryptoblock.ui.styles import COLORS
from .arguments import ArgumentCountConstraint, OddArgumentCountConstraint, PositiveNumberConstraint
from .base import Command, Prefix
from .market import CoinCommand

PORTFOLIO_LABEL = "Portfolio"

PORTFOLIO = Prefix("portfolio")

MAX_COINS = 10
MAX_TRADES = 5


def missing_entry_message(name: str) -> str:
    return f"There's no entry in portfolio manager for '{name}'."


def parse_trades(arguments: List[str]) -> List[Tuple[float, float]]:
    """Pair up "<amount> <price>" tokens. Expects an even, already validated list."""
    values = [float(token) for token in arguments]
    return list(zip(values[0::2], values[1::2]))


class ViewPortfolioCommand(CoinCommand):
    """Handles portfolio view command."""

    prefix = PORTFOLIO.extend("view")
    constraints = (ArgumentCountConstraint(0, MAX_COINS),)
    usage = "[coins...]"
    description = "Show portfolio entries"

    async def execute(self, arguments: List[str]) -> bool:
        portfolio = self.state.portfolio

        if arguments:
            coins = await self.resolve_coins(arguments)
            if coins is None:
                return False
            for coin in coins:
                if not portfolio.has_entry(coin.id):
                    self.output.error(missing_entry_message(coin.name))
                    return False
            entries = portfolio.entries(coin.id for coin in coins)
        else:
            entries = portfolio.entries()
            if not entries:
                self.output.notice("Portfolio is empty.")
                return True
            try:
                await self.state.listings.ensure_loaded()
            except MarketDataError as e:
                self.output.warning(f"Coin names are unavailable: {e}")

        listings = self.state.listings
        table = Table(title="Portfolio", box=ROUNDED, border_style=COLORS["primary"])
        table.add_column("Name", style=COLORS["secondary"])
        table.add_column("Symbol")
        table.add_column("Holdings", justify="right")
        table.add_column("Transactions", justify="right")
        table.add_column("Last Activity", style="dim", no_wrap=True)
        for entry in entries:
            listing = listings.get(entry.coin_id)
            table.add_row(
                listing.name if listing else f"#{entry.coin_id}",
                listing.symbol if listing else "-",
                f"{entry.holdings:g}",
                str(len(entry.transactions)),
                entry.last_activity,
            )

        self.output.data(table)
        return True


class AddPortfolioEntryCommand(CoinCommand):
    """Handles portfolio add command."""

    prefix = PORTFOLIO.extend("add")
    constraints = (ArgumentCountConstraint(1, MAX_COINS),)
    usage = "<coins...>"
    description = "Add coins to the portfolio"

    async def execute(self, arguments: List[str]) -> bool:
        coins = await self.resolve_coins(arguments)
        if coins is None:
            return False

        portfolio = self.state.portfolio
        for coin in coins:
            if portfolio.has_entry(coin.id):
                self.output.error(f"'{coin.name}' is already in the portfolio.")
                return False

        try:
            portfolio.add_entries([coin.id for coin in coins])
        except PortfolioError as e:
            self.output.error(str(e))
            return False

        names = ", ".join(f"'{coin.name}'" for coin in coins)
        self.output.success(f"Added {names} to portfolio.")
        return True


class RemovePortfolioEntryCommand(CoinCommand):
    """Handles portfolio remove command."""

    prefix = PORTFOLIO.extend("remove")
    constraints = (ArgumentCountConstraint(1, MAX_COINS),)
    usage = "<coins...>"
    description = "Remove coins from the portfolio"

    async def execute(self, arguments: List[str]) -> bool:
        coins = await self.resolve_coins(arguments)
        if coins is None:
            return False

        portfolio = self.state.portfolio
        for coin in coins:
            if not portfolio.has_entry(coin.id):
                self.output.error(missing_entry_message(coin.name))
                return False

        try:
            portfolio.remove_entries([coin.id for coin in coins])
        except PortfolioError as e:
            self.output.error(str(e))
            return False

        names = ", ".join(f"'{coin.name}'" for coin in coins)
        self.output.success(f"Removed {names} from portfolio.")
        return True


class ClearPortfolioCommand(Command):
    """Handles portfolio clear command."""

    prefix = PORTFOLIO.extend("clear")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Remove all portfolio entries"

    async def execute(self, arguments: List[str]) -> bool:
        try:
            removed = self.state.portfolio.clear()
        except PortfolioError as e:
            self.output.error(str(e))
            return False

        if removed == 0:
            self.output.notice("Portfolio is already empty.")
        else:
            self.output.success(f"Removed {removed} entr{'y' if removed == 1 else 'ies'} from portfolio.")
        return True


class TransactionCommand(CoinCommand):
    """Base for buy/sell: one coin followed by (amount, price) pairs."""

    constraints = (
        ArgumentCountConstraint(3, 1 + 2 * MAX_TRADES),
        OddArgumentCountConstraint(),
        PositiveNumberConstraint(start=1),
    )
    usage = "<coin> <amount> <price> [<amount> <price> ...]"

    async def resolve_coin(self, name: str) -> Optional[CoinListing]:
        coins = await self.resolve_coins([name])
        return coins[0] if coins else None


class BuyCommand(TransactionCommand):
    """Handles portfolio buy command."""

    prefix = PORTFOLIO.extend("buy")
    description = "Record purchases of a coin"

    async def execute(self, arguments: List[str]) -> bool:
        coin = await self.resolve_coin(arguments[0])
        if coin is None:
            return False

        portfolio = self.state.portfolio
        create = False
        if not portfolio.has_entry(coin.id):
            create = await ConfirmPrompt(f"Create new entry for '{coin.name}'?", default=True).run()
            if not create:
                self.output.notice("Purchase was not recorded.")
                return True

        trades = parse_trades(arguments[1:])
        try:
            entry = portfolio.buy(coin.id, trades, create=create)
        except PortfolioError as e:
            self.output.error(str(e))
            return False

        self.output.success(
            f"Recorded {len(trades)} purchase(s) of '{coin.name}'. Holdings: {entry.holdings:g}."
        )
        return True


class SellCommand(TransactionCommand):
    """Handles portfolio sell command."""

    prefix = PORTFOLIO.extend("sell")
    description = "Record sales of a coin"

    async def execute(self, arguments: List[str]) -> bool:
        coin = await self.resolve_coin(arguments[0])
        if coin is None:
            return False

        portfolio = self.state.portfolio
        if not portfolio.has_entry(coin.id):
            self.output.error(missing_entry_message(coin.name))
            return False

        trades = parse_trades(arguments[1:])
        try:
            entry = portfolio.sell(coin.id, trades)
        except InsufficientHoldingsError as e:
            self.output.error(
                f"Insufficient holdings for '{coin.name}': "
                f"{e.holdings:g} held, {e.requested:g} requested."
            )
            return False
        except PortfolioError as e:
            self.output.error(str(e))
            return False

        self.output.success(
            f"Recorded {len(trades)} sale(s) of '{coin.name}'. Holdings: {entry.holdings:g}."
        )
        return True


class UndoPortfolioCommand(Command):
    """Handles portfolio undo command."""

    prefix = PORTFOLIO.extend("undo")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Revert the last portfolio change"

    async def execute(self, arguments: List[str]) -> bool:
        try:
            undone = self.state.portfolio.undo()
        except PortfolioError as e:
            self.output.error(str(e))
            return False

        if not undone:
            self.output.error("No changes were recently made to portfolio.")
            return False

        self.output.success("Last portfolio change was undone.")
        return True


PORTFOLIO_COMMANDS = [
    ViewPortfolioCommand,
    AddPortfolioEntryCommand,
    RemovePortfolioEntryCommand,
    ClearPortfolioCommand,
    BuyCommand,
    SellCommand,
    UndoPortfolioCommand,
]
