"""Tests for the portfolio manager and its JSON storage."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cryptoblock.portfolio import (
    CoinAlreadyInPortfolioError,
    CoinNotInPortfolioError,
    InsufficientHoldingsError,
    PortfolioManager,
    PortfolioStorage,
    PortfolioStorageError,
    TransactionType,
)


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "portfolio.json"


@pytest.fixture
def portfolio(storage_path: Path) -> PortfolioManager:
    return PortfolioManager(PortfolioStorage(storage_path), undo_depth=3)


class TestEntries:
    def test_add_and_remove(self, portfolio: PortfolioManager) -> None:
        portfolio.add_entries([1, 1027])
        assert portfolio.coin_ids == [1, 1027]

        portfolio.remove_entries([1])
        assert portfolio.coin_ids == [1027]

    def test_add_existing_changes_nothing(self, portfolio: PortfolioManager) -> None:
        portfolio.add_entries([1])
        with pytest.raises(CoinAlreadyInPortfolioError):
            portfolio.add_entries([2, 1])
        assert portfolio.coin_ids == [1]

    def test_remove_missing(self, portfolio: PortfolioManager) -> None:
        with pytest.raises(CoinNotInPortfolioError):
            portfolio.remove_entries([5])

    def test_clear(self, portfolio: PortfolioManager) -> None:
        portfolio.add_entries([1, 2])
        assert portfolio.clear() == 2
        assert len(portfolio) == 0
        assert portfolio.clear() == 0


class TestTransactions:
    def test_buy_and_sell_update_holdings(self, portfolio: PortfolioManager) -> None:
        portfolio.add_entries([1])
        portfolio.buy(1, [(1.5, 100.0), (0.5, 120.0)])
        entry = portfolio.sell(1, [(0.75, 130.0)])

        assert entry.holdings == pytest.approx(1.25)
        assert [t.type for t in entry.transactions] == [
            TransactionType.BUY, TransactionType.BUY, TransactionType.SELL,
        ]

    def test_buy_requires_entry_unless_created(self, portfolio: PortfolioManager) -> None:
        with pytest.raises(CoinNotInPortfolioError):
            portfolio.buy(1, [(1.0, 10.0)])

        entry = portfolio.buy(1, [(1.0, 10.0)], create=True)
        assert entry.holdings == 1.0

    def test_sell_more_than_held(self, portfolio: PortfolioManager) -> None:
        portfolio.buy(1, [(1.0, 10.0)], create=True)
        with pytest.raises(InsufficientHoldingsError) as info:
            portfolio.sell(1, [(0.6, 10.0), (0.6, 10.0)])
        assert info.value.requested == pytest.approx(1.2)
        assert portfolio.get_entry(1).holdings == 1.0

    def test_selling_exact_float_sum(self, portfolio: PortfolioManager) -> None:
        portfolio.buy(1, [(0.1, 1.0), (0.2, 1.0)], create=True)
        portfolio.sell(1, [(0.3, 1.0)])
        assert portfolio.get_entry(1).holdings == pytest.approx(0.0)


class TestUndo:
    def test_undo_reverts_last_change(self, portfolio: PortfolioManager) -> None:
        portfolio.add_entries([1])
        portfolio.buy(1, [(2.0, 50.0)])

        assert portfolio.undo()
        assert portfolio.get_entry(1).holdings == 0
        assert portfolio.undo()
        assert not portfolio.has_entry(1)
        assert not portfolio.undo()

    def test_undo_depth_is_bounded(self, portfolio: PortfolioManager) -> None:
        for coin_id in range(1, 6):
            portfolio.add_entries([coin_id])

        undone = 0
        while portfolio.undo():
            undone += 1

        assert undone == 3
        assert portfolio.coin_ids == [1, 2]

    def test_undo_is_persisted(self, portfolio: PortfolioManager, storage_path: Path) -> None:
        portfolio.add_entries([1])
        portfolio.clear()
        portfolio.undo()
        assert PortfolioManager(PortfolioStorage(storage_path)).coin_ids == [1]


class TestStorage:
    def test_round_trip_through_file(self, portfolio: PortfolioManager, storage_path: Path) -> None:
        portfolio.buy(1027, [(3.0, 2000.0)], create=True)

        reloaded = PortfolioManager(PortfolioStorage(storage_path))
        entry = reloaded.get_entry(1027)
        assert entry.holdings == 3.0
        assert entry.transactions[0].price == 2000.0
        assert not reloaded.can_undo

    def test_malformed_file(self, storage_path: Path) -> None:
        storage_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PortfolioStorageError):
            PortfolioStorage(storage_path).load()

    def test_malformed_entry(self, storage_path: Path) -> None:
        storage_path.write_text(json.dumps({"entries": [{"transactions": []}]}), encoding="utf-8")
        with pytest.raises(PortfolioStorageError, match="malformed entry"):
            PortfolioStorage(storage_path).load()

    def test_failed_save_rolls_back(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        portfolio = PortfolioManager(PortfolioStorage(blocker / "portfolio.json"))

        with pytest.raises(PortfolioStorageError):
            portfolio.add_entries([1])
        assert len(portfolio) == 0
        assert not portfolio.can_undo
