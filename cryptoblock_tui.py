"""
CryptoBlock Terminal UI
Interactive console for coin market data and portfolio bookkeeping

One line is read, dispatched and run to completion before the next is read.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.box import ROUNDED

from cryptoblock import __version__
from cryptoblock.commands import AppState, CommandDispatcher, CommandResult
from cryptoblock.context import CommandHistory
from cryptoblock.market import CoinListingRepository, MarketClient, MarketConfig
from cryptoblock.portfolio import PortfolioManager, PortfolioStorage, PortfolioStorageError
from cryptoblock.settings import SettingsManager
from cryptoblock.ui import COLORS, STYLES, ConsoleOutput


# ═══════════════════════════════════════════════════════════════════════════════
# Constants & Configuration
# ═══════════════════════════════════════════════════════════════════════════════

CONFIG_PATH = Path("cryptoblock_config.json")
DEFAULT_DATA_DIR = Path(".cryptoblock")

SETTINGS_FILE = "settings.json"
PORTFOLIO_FILE = "portfolio.json"
HISTORY_FILE = "history.jsonl"
ERROR_LOG_FILE = "error_log.jsonl"

DEFAULT_HISTORY_CAPACITY = 100
DEFAULT_UNDO_DEPTH = 20

VERSION = __version__


def load_config(path: Path = CONFIG_PATH) -> dict:
    """Load configuration from file."""
    if not path.exists():
        return {}
    try:
        config = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return {}
    return config if isinstance(config, dict) else {}


def build_state(config: dict, console: Optional[Console] = None) -> AppState:
    """Create every collaborator commands need. Raises PortfolioStorageError on a broken portfolio file."""
    data_dir = Path(os.getenv("CRYPTOBLOCK_DATA_DIR") or config.get("data_dir") or DEFAULT_DATA_DIR)
    history_capacity = int(os.getenv("HISTORY_CAPACITY") or config.get("history_capacity", DEFAULT_HISTORY_CAPACITY))
    undo_depth = int(os.getenv("UNDO_DEPTH") or config.get("undo_depth", DEFAULT_UNDO_DEPTH))

    settings = SettingsManager(data_dir / SETTINGS_FILE)
    output = ConsoleOutput(
        console=console or Console(),
        profile=settings.reporting_profile,
        error_log_path=data_dir / ERROR_LOG_FILE,
    )
    market_client = MarketClient(MarketConfig.from_env(config))

    return AppState(
        output=output,
        settings=settings,
        portfolio=PortfolioManager(PortfolioStorage(data_dir / PORTFOLIO_FILE), undo_depth=undo_depth),
        market_client=market_client,
        listings=CoinListingRepository(market_client),
        history=CommandHistory(data_dir / HISTORY_FILE, capacity=history_capacity),
        data_dir=data_dir,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# UI
# ═══════════════════════════════════════════════════════════════════════════════

def print_dashboard(state: AppState) -> None:
    """Print the startup banner."""
    info = Table(show_header=False, box=None, padding=(0, 2))
    info.add_row(Text(f"Reporting profile: {state.settings.reporting_profile.title}", style="dim white"))
    info.add_row(Text(f"Portfolio entries: {len(state.portfolio)}", style="dim white"))
    info.add_row(Text(f"Data: {state.data_dir}", style="dim white"))
    if not state.market_client.is_configured:
        info.add_row(Text("CMC_API_KEY is not set; market data commands will fail.", style=COLORS["warning"]))

    tips = Text()
    tips.append("Getting started\n", style=f"bold {COLORS['primary']}")
    for command, desc in (
        ("help", "list all commands"),
        ("ticker bitcoin eth", "latest prices"),
        ("portfolio view", "your holdings"),
        ("exit", "quit"),
    ):
        tips.append(f"  {command}", style=COLORS["secondary"])
        tips.append(f"  {desc}\n", style="dim white")

    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(ratio=1)
    grid.add_row(info, tips)

    state.console.print(Panel(
        grid,
        title=f" CryptoBlock {VERSION} ",
        title_align="left",
        border_style=COLORS["primary"],
        box=ROUNDED,
        padding=(1, 2),
    ))
    state.output.system(f"Loaded {len(state.history)} history entries and {len(state.settings.user_commands)} user defined command(s).")


# ═══════════════════════════════════════════════════════════════════════════════
# Read loop
# ═══════════════════════════════════════════════════════════════════════════════

async def process_line(state: AppState, dispatcher: CommandDispatcher, line: str) -> Optional[CommandResult]:
    """
    Expand aliases, dispatch, and record one input line.

    Unexpected exceptions are reported and logged instead of propagating, so
    the read loop keeps going. Returns None for blank lines and crashes.
    """
    if not line.strip():
        return None

    expanded = state.settings.expand(line)
    if expanded != line:
        state.output.system(f"Running '{expanded}'.")

    result: Optional[CommandResult] = None
    try:
        result = await dispatcher.dispatch(expanded)
    except Exception as e:
        state.output.exception(e, line=expanded)

    try:
        state.history.append(line.strip(), status=result.status.value if result else "error")
    except OSError as e:
        state.output.warning(f"Could not write command history: {e}")
    return result


async def main() -> None:
    """Main application entry point."""
    load_dotenv()
    config = load_config()
    console = Console()

    try:
        state = build_state(config, console)
    except PortfolioStorageError as e:
        console.print(f"[{COLORS['error']}]✗ {e}[/{COLORS['error']}]")
        return

    # Duplicate prefixes are a build defect; let DuplicatePrefixError abort startup
    dispatcher = CommandDispatcher(state)

    print_dashboard(state)

    completer = WordCompleter(
        dispatcher.get_registered_prefixes(),
        meta_dict={str(c.prefix): c.description for c in dispatcher.get_registered_commands()},
        ignore_case=True,
        sentence=True,
    )
    session = PromptSession(style=STYLES, completer=completer, complete_while_typing=True)

    try:
        while not state.should_exit:
            try:
                with patch_stdout():
                    text = await session.prompt_async(
                        HTML(f'<style fg="{COLORS["primary"]}">[CryptoBlock]</style> ❯ '),
                        bottom_toolbar=HTML(
                            ' <style bg="#333333" fg="#ffffff"><b> Tab </b></style> Complete '
                            ' <style bg="#333333" fg="#ffffff"><b> help </b></style> Commands '
                            ' <style bg="#333333" fg="#ffffff"><b> Ctrl-D </b></style> Exit '
                        ),
                    )
            except (EOFError, KeyboardInterrupt):
                console.print("\n[dim]Goodbye! 👋[/dim]")
                break

            await process_line(state, dispatcher, text)
    finally:
        await state.market_client.close()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
