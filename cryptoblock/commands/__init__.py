"""
Command Dispatch Module

Provides the dispatcher that turns an input line into one validated
command invocation across the System, Market and Portfolio registries.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from .base import (
    AppState,
    Command,
    CommandRegistry,
    CommandResult,
    DispatchStatus,
    DuplicatePrefixError,
    Prefix,
)
from .arguments import (
    ArgumentConstraint,
    ArgumentCountConstraint,
    OddArgumentCountConstraint,
    PositiveNumberConstraint,
)
from .system import SYSTEM_COMMANDS, SYSTEM_LABEL
from .market import MARKET_COMMANDS, MARKET_LABEL
from .portfolio import PORTFOLIO_COMMANDS, PORTFOLIO_LABEL


class CommandDispatcher:
    """
    Routes input lines to commands.

    Every registry is asked for its longest matching prefix and the longest
    one overall wins. Prefixes must be unique across registries, so two
    registries can never tie.
    """

    def __init__(self, state: AppState, registries: Optional[Iterable[CommandRegistry]] = None):
        self.state = state
        self.output = state.output
        self.registries: List[CommandRegistry] = []

        if registries is None:
            registries = self._default_registries()
        for registry in registries:
            self.add_registry(registry)

        state.dispatcher = self

    def _default_registries(self) -> List[CommandRegistry]:
        """Build the built-in registries."""
        return [
            CommandRegistry(SYSTEM_LABEL, [cls(self.state) for cls in SYSTEM_COMMANDS]),
            CommandRegistry(MARKET_LABEL, [cls(self.state) for cls in MARKET_COMMANDS]),
            CommandRegistry(PORTFOLIO_LABEL, [cls(self.state) for cls in PORTFOLIO_COMMANDS]),
        ]

    def add_registry(self, registry: CommandRegistry) -> None:
        """Append a registry. Raises DuplicatePrefixError if it shares a prefix with an earlier one."""
        for prefix in registry.prefixes:
            for other in self.registries:
                if prefix in other:
                    raise DuplicatePrefixError(prefix, registry.label, other.label)
        self.registries.append(registry)

    def resolve(self, tokens: Sequence[str]) -> Optional[Tuple[Command, int]]:
        """Longest matching (command, prefix length) across all registries; earlier registries win ties."""
        best: Optional[Tuple[Command, int]] = None
        for registry in self.registries:
            hit = registry.try_resolve(tokens)
            if hit is not None and (best is None or hit[1] > best[1]):
                best = hit
        return best

    async def dispatch(self, line: str) -> CommandResult:
        """
        Dispatch one input line.

        Args:
            line: Raw user input (e.g., "settings get reporting profile")

        Returns:
            CommandResult with the outcome. Unexpected exceptions raised by
            the command propagate to the caller.
        """
        tokens = line.split()
        if not tokens:
            return CommandResult.not_found()

        hit = self.resolve(tokens)
        if hit is None:
            self.output.error(f"Unrecognized command: '{line.strip()}'.")
            return CommandResult.not_found()

        command, length = hit
        arguments = tokens[length:]

        violation = command.first_violation(arguments)
        if violation is not None:
            violation.on_invalid(arguments, self.output)
            return CommandResult.invalid_arguments(command, arguments)

        if not await command.execute(arguments):
            return CommandResult.failed(command, arguments)
        return CommandResult.success(command, arguments)

    def reserved_word(self, word: str) -> Optional[str]:
        """Return the first word of a command prefix that ``word`` begins with, else None."""
        word = word.lower()
        for command in self.get_registered_commands():
            first_word = command.prefix.words[0]
            if word.startswith(first_word):
                return first_word
        return None

    def get_registered_commands(self) -> List[Command]:
        """All commands, registry by registry."""
        commands = []
        for registry in self.registries:
            commands.extend(registry.commands)
        return commands

    def get_registered_prefixes(self) -> List[str]:
        return [str(command.prefix) for command in self.get_registered_commands()]


def create_dispatcher(state: AppState) -> CommandDispatcher:
    """Create a command dispatcher with the built-in registries."""
    return CommandDispatcher(state)


__all__ = [
    "AppState",
    "Command",
    "CommandRegistry",
    "CommandResult",
    "CommandDispatcher",
    "DispatchStatus",
    "DuplicatePrefixError",
    "Prefix",
    "ArgumentConstraint",
    "ArgumentCountConstraint",
    "OddArgumentCountConstraint",
    "PositiveNumberConstraint",
    "create_dispatcher",
]
