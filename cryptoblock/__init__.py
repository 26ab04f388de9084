"""
CryptoBlock - interactive cryptocurrency console

This package provides:
- Command dispatch (commands/) - prefixes, registries, argument constraints
- Recent-command context (context/) - bounded searchable stack and history
- Market data (market/) - CoinMarketCap client and listing cache
- Portfolio bookkeeping (portfolio/) - entries, transactions, undo
- User settings (settings/) - reporting profiles and command aliases
- UI (ui/) - console output sink, styles and interactive prompts
"""

__version__ = "0.3.0"

from .commands import (
    AppState,
    Command,
    CommandDispatcher,
    CommandRegistry,
    CommandResult,
    DispatchStatus,
    DuplicatePrefixError,
    Prefix,
    ArgumentConstraint,
    ArgumentCountConstraint,
    create_dispatcher,
)
from .context import SearchableStack, CommandHistory
from .market import MarketClient, MarketConfig, CoinListingRepository
from .portfolio import PortfolioManager, PortfolioStorage
from .settings import SettingsManager
from .ui import ConsoleOutput

__all__ = [
    # Command dispatch
    "AppState",
    "Command",
    "CommandDispatcher",
    "CommandRegistry",
    "CommandResult",
    "DispatchStatus",
    "DuplicatePrefixError",
    "Prefix",
    "ArgumentConstraint",
    "ArgumentCountConstraint",
    "create_dispatcher",
    # Context
    "SearchableStack",
    "CommandHistory",
    # Market data
    "MarketClient",
    "MarketConfig",
    "CoinListingRepository",
    # Portfolio
    "PortfolioManager",
    "PortfolioStorage",
    # Settings
    "SettingsManager",
    # UI
    "ConsoleOutput",
]
