"""
Argument constraints

A constraint checks the tokens left after a command's prefix. Failing is a
plain False from is_valid(); the dispatcher then calls on_invalid() once to
print the diagnostic.
"""

from typing import Sequence

from cryptoblock.ui.output import ConsoleOutput


class ArgumentConstraint:
    """Base class for argument constraints."""

    def is_valid(self, arguments: Sequence[str]) -> bool:
        raise NotImplementedError("Subclasses must implement is_valid()")

    def on_invalid(self, arguments: Sequence[str], output: ConsoleOutput) -> None:
        raise NotImplementedError("Subclasses must implement on_invalid()")


class ArgumentCountConstraint(ArgumentConstraint):
    """Number of arguments must lie in [minimum, maximum], both inclusive."""

    def __init__(self, minimum: int, maximum: int):
        if minimum < 0 or maximum < minimum:
            raise ValueError(f"Invalid argument count range: [{minimum}, {maximum}]")
        self.minimum = minimum
        self.maximum = maximum

    def is_valid(self, arguments: Sequence[str]) -> bool:
        return self.minimum <= len(arguments) <= self.maximum

    def on_invalid(self, arguments: Sequence[str], output: ConsoleOutput) -> None:
        output.error(
            "Wrong number of arguments for command: should be between "
            f"{self.minimum} and {self.maximum}."
        )

    def __repr__(self) -> str:
        return f"ArgumentCountConstraint({self.minimum}, {self.maximum})"


class OddArgumentCountConstraint(ArgumentConstraint):
    """Number of arguments must be odd (a name followed by pairs)."""

    def is_valid(self, arguments: Sequence[str]) -> bool:
        return len(arguments) % 2 == 1

    def on_invalid(self, arguments: Sequence[str], output: ConsoleOutput) -> None:
        output.error("Invalid format: number of arguments must be odd.")


class PositiveNumberConstraint(ArgumentConstraint):
    """Every argument from ``start`` on must be a positive, finite number."""

    def __init__(self, start: int = 0):
        self.start = start

    @staticmethod
    def _is_positive_number(token: str) -> bool:
        try:
            value = float(token)
        except ValueError:
            return False
        return 0 < value < float("inf")

    def _first_invalid(self, arguments: Sequence[str]):
        for token in arguments[self.start:]:
            if not self._is_positive_number(token):
                return token
        return None

    def is_valid(self, arguments: Sequence[str]) -> bool:
        return self._first_invalid(arguments) is None

    def on_invalid(self, arguments: Sequence[str], output: ConsoleOutput) -> None:
        output.error(
            f"Invalid amount: '{self._first_invalid(arguments)}'. "
            "Amounts and prices must be positive numbers."
        )
