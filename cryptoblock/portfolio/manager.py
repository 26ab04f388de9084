"""
Portfolio Manager for CryptoBlock

Tracks which coins the user follows and the buy/sell transactions made
for each. Every mutation is saved immediately and can be undone; undo
snapshots live in a bounded SearchableStack, so only the most recent
``undo_depth`` changes are revertible.
"""

import copy
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from cryptoblock.context.stack import SearchableStack
from .storage import (
    PortfolioEntry,
    PortfolioError,
    PortfolioStorage,
    PortfolioStorageError,
    Transaction,
    TransactionType,
)


class CoinAlreadyInPortfolioError(PortfolioError):
    def __init__(self, coin_id: int):
        super().__init__(f"Coin #{coin_id} is already in the portfolio.")
        self.coin_id = coin_id


class CoinNotInPortfolioError(PortfolioError):
    def __init__(self, coin_id: int):
        super().__init__(f"Coin #{coin_id} is not in the portfolio.")
        self.coin_id = coin_id


class InsufficientHoldingsError(PortfolioError):
    def __init__(self, coin_id: int, holdings: float, requested: float):
        super().__init__(
            f"Cannot sell {requested:g} of coin #{coin_id}: only {holdings:g} held."
        )
        self.coin_id = coin_id
        self.holdings = holdings
        self.requested = requested


# (amount, price per coin)
Trade = Tuple[float, float]

Snapshot = Dict[int, PortfolioEntry]

# Float slack when comparing a sale against current holdings
HOLDINGS_TOLERANCE = 1e-9


class PortfolioManager:
    """
    Manages portfolio entries with undo.

    Usage:
        portfolio = PortfolioManager(PortfolioStorage(Path("portfolio.json")))
        portfolio.add_entries([1])
        portfolio.buy(1, [(0.5, 30000.0)])
        portfolio.undo()   # back to an empty entry for coin 1
    """

    def __init__(self, storage: Optional[PortfolioStorage] = None, undo_depth: int = 20):
        self.storage = storage or PortfolioStorage()
        self._entries: Dict[int, PortfolioEntry] = self.storage.load()
        self._undo_stack: SearchableStack[Snapshot] = SearchableStack(undo_depth)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def coin_ids(self) -> List[int]:
        return list(self._entries)

    @property
    def can_undo(self) -> bool:
        return not self._undo_stack.empty

    def has_entry(self, coin_id: int) -> bool:
        return coin_id in self._entries

    def get_entry(self, coin_id: int) -> PortfolioEntry:
        try:
            return self._entries[coin_id]
        except KeyError:
            raise CoinNotInPortfolioError(coin_id) from None

    def entries(self, coin_ids: Optional[Iterable[int]] = None) -> List[PortfolioEntry]:
        if coin_ids is None:
            return list(self._entries.values())
        return [self.get_entry(coin_id) for coin_id in coin_ids]

    # ─────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────

    def _commit(self, snapshot: Snapshot) -> None:
        """Save current entries and remember ``snapshot`` for undo. Rolls back on failure."""
        try:
            self.storage.save(self._entries)
        except PortfolioStorageError:
            self._entries = snapshot
            raise
        self._undo_stack.push(snapshot)

    def _snapshot(self) -> Snapshot:
        return copy.deepcopy(self._entries)

    def add_entries(self, coin_ids: Sequence[int]) -> None:
        for coin_id in coin_ids:
            if coin_id in self._entries:
                raise CoinAlreadyInPortfolioError(coin_id)

        snapshot = self._snapshot()
        for coin_id in coin_ids:
            self._entries[coin_id] = PortfolioEntry(coin_id=coin_id)
        self._commit(snapshot)

    def remove_entries(self, coin_ids: Sequence[int]) -> None:
        for coin_id in coin_ids:
            if coin_id not in self._entries:
                raise CoinNotInPortfolioError(coin_id)

        snapshot = self._snapshot()
        for coin_id in coin_ids:
            del self._entries[coin_id]
        self._commit(snapshot)

    def clear(self) -> int:
        """Remove all entries. Returns how many were removed."""
        removed = len(self._entries)
        if removed == 0:
            return 0

        snapshot = self._snapshot()
        self._entries = {}
        self._commit(snapshot)
        return removed

    def buy(self, coin_id: int, trades: Sequence[Trade], create: bool = False) -> PortfolioEntry:
        """
        Record purchases of ``coin_id``.

        Args:
            coin_id: Coin to buy
            trades: (amount, price) pairs
            create: Create the entry if the coin is not yet in the portfolio
        """
        if coin_id not in self._entries and not create:
            raise CoinNotInPortfolioError(coin_id)

        snapshot = self._snapshot()
        entry = self._entries.setdefault(coin_id, PortfolioEntry(coin_id=coin_id))
        for amount, price in trades:
            entry.transactions.append(Transaction(TransactionType.BUY, amount, price))
        self._commit(snapshot)
        return entry

    def sell(self, coin_id: int, trades: Sequence[Trade]) -> PortfolioEntry:
        entry = self.get_entry(coin_id)
        requested = sum(amount for amount, _ in trades)
        if requested - entry.holdings > HOLDINGS_TOLERANCE:
            raise InsufficientHoldingsError(coin_id, entry.holdings, requested)

        snapshot = self._snapshot()
        entry = self._entries[coin_id]
        for amount, price in trades:
            entry.transactions.append(Transaction(TransactionType.SELL, amount, price))
        self._commit(snapshot)
        return entry

    def undo(self) -> bool:
        """Revert the most recent mutation. Returns False if there is nothing to undo."""
        if self._undo_stack.empty:
            return False

        snapshot = self._undo_stack.top_element()
        current = self._entries
        self._entries = snapshot
        try:
            self.storage.save(self._entries)
        except PortfolioStorageError:
            self._entries = current
            raise
        self._undo_stack.pop()
        return True
