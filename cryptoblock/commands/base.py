"""
Command Base Classes and AppState

This module provides the foundation for the command architecture:
- AppState: Centralized state container handed to every command
- Prefix: Multi-word command address, built by extending a parent prefix
- Command: Base class for commands
- CommandRegistry: One feature area's set of commands, keyed by prefix
- CommandResult: Outcome of dispatching one input line
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from rich.console import Console

from cryptoblock.ui.output import ConsoleOutput
from .arguments import ArgumentConstraint, ArgumentCountConstraint


@dataclass
class AppState:
    """
    Centralized state container for the application.

    Commands reach every collaborator (output sink, stores, API client)
    through this object instead of module globals.
    """
    output: ConsoleOutput = field(default_factory=ConsoleOutput)

    # Managers (set during initialization)
    settings: Any = None         # SettingsManager
    portfolio: Any = None        # PortfolioManager
    market_client: Any = None    # MarketClient
    listings: Any = None         # CoinListingRepository
    history: Any = None          # CommandHistory
    dispatcher: Any = None       # CommandDispatcher, set by the dispatcher itself

    data_dir: Path = field(default_factory=Path.cwd)
    should_exit: bool = False

    @property
    def console(self) -> Console:
        return self.output.console

    def request_exit(self) -> None:
        """Mark that the read loop should stop after this command."""
        self.should_exit = True


class DuplicatePrefixError(Exception):
    """Two commands were registered under the same prefix."""

    def __init__(self, prefix: "Prefix", label: str, other_label: Optional[str] = None):
        if other_label is None or other_label == label:
            message = f"Command prefix '{prefix}' is already registered in the {label} registry."
        else:
            message = (
                f"Command prefix '{prefix}' of the {label} registry is already "
                f"registered in the {other_label} registry."
            )
        super().__init__(message)
        self.prefix = prefix
        self.label = label
        self.other_label = other_label


class Prefix:
    """
    Ordered, lowercase words addressing one command.

    Prefixes are composed rather than subclassed:
        SETTINGS = Prefix("settings")
        SETTINGS_GET = SETTINGS.extend("get")
        SETTINGS_GET.extend("reporting", "profile")   # settings get reporting profile
    """

    __slots__ = ("_words",)

    def __init__(self, *words: str):
        parts = tuple(part.lower() for word in words for part in word.split())
        if not parts:
            raise ValueError("A command prefix needs at least one word")
        self._words = parts

    @property
    def words(self) -> Tuple[str, ...]:
        return self._words

    def extend(self, *words: str) -> "Prefix":
        return Prefix(*self._words, *words)

    def matches(self, tokens: Sequence[str]) -> bool:
        """True if this prefix is a leading, word-exact subsequence of ``tokens``."""
        if len(tokens) < len(self._words):
            return False
        return all(token.lower() == word for token, word in zip(tokens, self._words))

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Prefix):
            return self._words == other._words
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._words)

    def __str__(self) -> str:
        return " ".join(self._words)

    def __repr__(self) -> str:
        return f"Prefix({str(self)!r})"


class DispatchStatus(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_ARGUMENTS = "invalid_arguments"
    EXECUTION_FAILED = "execution_failed"
    SUCCESS = "success"


class CommandResult:
    """Result of dispatching one input line."""

    def __init__(
        self,
        status: DispatchStatus,
        command: Optional["Command"] = None,
        arguments: Sequence[str] = (),
    ):
        self.status = status
        self.command = command
        self.arguments = list(arguments)

    @property
    def handled(self) -> bool:
        """A command owned the input (whatever happened next)."""
        return self.status != DispatchStatus.NOT_FOUND

    @classmethod
    def not_found(cls) -> "CommandResult":
        return cls(DispatchStatus.NOT_FOUND)

    @classmethod
    def invalid_arguments(cls, command: "Command", arguments: Sequence[str]) -> "CommandResult":
        return cls(DispatchStatus.INVALID_ARGUMENTS, command, arguments)

    @classmethod
    def failed(cls, command: "Command", arguments: Sequence[str]) -> "CommandResult":
        return cls(DispatchStatus.EXECUTION_FAILED, command, arguments)

    @classmethod
    def success(cls, command: "Command", arguments: Sequence[str]) -> "CommandResult":
        return cls(DispatchStatus.SUCCESS, command, arguments)

    def __repr__(self) -> str:
        name = str(self.command.prefix) if self.command else None
        return f"CommandResult({self.status.value}, command={name!r}, arguments={self.arguments!r})"


class Command:
    """
    Base class for commands.

    Subclasses set:
    - prefix: The command's address
    - constraints: Argument constraints, checked in order
    - usage / description: Help text
    and implement execute().
    """

    prefix: Prefix
    constraints: Tuple[ArgumentConstraint, ...] = ()
    usage: str = ""
    description: str = ""

    def __init__(self, state: AppState, prefix: Optional[Prefix] = None):
        self.state = state
        self.output = state.output
        if prefix is not None:
            self.prefix = prefix
        self.constraints = tuple(self.constraints)

    @property
    def argument_range(self) -> Optional[Tuple[int, int]]:
        """Bounds of the first count constraint, for help output."""
        for constraint in self.constraints:
            if isinstance(constraint, ArgumentCountConstraint):
                return constraint.minimum, constraint.maximum
        return None

    def first_violation(self, arguments: Sequence[str]) -> Optional[ArgumentConstraint]:
        for constraint in self.constraints:
            if not constraint.is_valid(arguments):
                return constraint
        return None

    async def execute(self, arguments: List[str]) -> bool:
        """
        Run the command.

        Args:
            arguments: Tokens after the prefix

        Returns:
            True on success. On failure the command has already printed why.
        """
        raise NotImplementedError("Subclasses must implement execute()")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} '{self.prefix}'>"


class CommandRegistry:
    """
    A feature area's commands, keyed by unique prefix.

    Usage:
        registry = CommandRegistry("System", [StatusCommand(state)])
        registry.try_resolve(["status", "connection"])   # (command, 2)
    """

    def __init__(self, label: str, commands: Iterable[Command] = ()):
        self.label = label
        self._commands: Dict[Tuple[str, ...], Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> None:
        key = command.prefix.words
        if key in self._commands:
            raise DuplicatePrefixError(command.prefix, self.label)
        self._commands[key] = command

    def try_resolve(self, tokens: Sequence[str]) -> Optional[Tuple[Command, int]]:
        """Return the command with the longest prefix leading ``tokens``, and that prefix's length."""
        words = tuple(token.lower() for token in tokens)
        for length in range(len(words), 0, -1):
            command = self._commands.get(words[:length])
            if command is not None:
                return command, length
        return None

    def __contains__(self, prefix: Prefix) -> bool:
        return prefix.words in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def prefixes(self) -> List[Prefix]:
        return [command.prefix for command in self.commands]

    @property
    def commands(self) -> List[Command]:
        """Commands sorted by prefix."""
        return [self._commands[key] for key in sorted(self._commands)]

    def __repr__(self) -> str:
        return f"CommandRegistry({self.label!r}, {len(self)} commands)"
