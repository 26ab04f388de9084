"""
Recent-command context for CryptoBlock
"""

from .stack import SearchableStack, StackError, EmptyStackError, StackIndexError
from .history import CommandHistory, HistoryEntry

__all__ = [
    "SearchableStack",
    "StackError",
    "EmptyStackError",
    "StackIndexError",
    "CommandHistory",
    "HistoryEntry",
]
