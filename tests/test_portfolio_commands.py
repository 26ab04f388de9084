"""Tests for the Portfolio registry commands."""

from __future__ import annotations

import asyncio

import pytest

from cryptoblock.commands import AppState, DispatchStatus
from cryptoblock.commands import portfolio as portfolio_commands


def dispatch(dispatcher, line: str):
    return asyncio.run(dispatcher.dispatch(line))


class FakeConfirmPrompt:
    answer = True
    messages: list = []

    def __init__(self, message: str, default: bool = False):
        FakeConfirmPrompt.messages.append(message)

    async def run(self) -> bool:
        return FakeConfirmPrompt.answer


@pytest.fixture
def confirm(monkeypatch):
    monkeypatch.setattr(portfolio_commands, "ConfirmPrompt", FakeConfirmPrompt)
    monkeypatch.setattr(FakeConfirmPrompt, "answer", True)
    monkeypatch.setattr(FakeConfirmPrompt, "messages", [])
    return FakeConfirmPrompt


class TestEntries:
    def test_add_view_remove(self, dispatcher, state: AppState, printed) -> None:
        assert dispatch(dispatcher, "portfolio add btc eth").status == DispatchStatus.SUCCESS
        assert state.portfolio.coin_ids == [1, 1027]
        assert "Added 'Bitcoin', 'Ethereum' to portfolio." in printed()

        assert dispatch(dispatcher, "portfolio view").status == DispatchStatus.SUCCESS
        assert "Ethereum" in printed()

        assert dispatch(dispatcher, "portfolio remove eth").status == DispatchStatus.SUCCESS
        assert state.portfolio.coin_ids == [1]

    def test_add_existing(self, dispatcher, printed) -> None:
        dispatch(dispatcher, "portfolio add btc")
        result = dispatch(dispatcher, "portfolio add bitcoin")
        assert result.status == DispatchStatus.EXECUTION_FAILED
        assert "'Bitcoin' is already in the portfolio." in printed()

    def test_view_missing_entry(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "portfolio view ltc")
        assert result.status == DispatchStatus.EXECUTION_FAILED
        assert "There's no entry in portfolio manager for 'Litecoin'." in printed()

    def test_view_empty(self, dispatcher, printed) -> None:
        dispatch(dispatcher, "portfolio view")
        assert "Portfolio is empty." in printed()

    def test_view_without_listings_shows_ids(self, dispatcher, state: AppState, market_client, printed) -> None:
        state.portfolio.add_entries([1027])
        market_client.fail = True

        result = dispatch(dispatcher, "portfolio view")

        assert result.status == DispatchStatus.SUCCESS
        assert "#1027" in printed()
        assert "Coin names are unavailable" in printed()

    def test_clear(self, dispatcher, state: AppState) -> None:
        dispatch(dispatcher, "portfolio add btc eth")
        assert dispatch(dispatcher, "portfolio clear").status == DispatchStatus.SUCCESS
        assert len(state.portfolio) == 0


class TestTransactions:
    def test_buy_existing_entry(self, dispatcher, state: AppState, confirm, printed) -> None:
        dispatch(dispatcher, "portfolio add btc")
        result = dispatch(dispatcher, "portfolio buy btc 0.5 30000 0.25 32000")

        assert result.status == DispatchStatus.SUCCESS
        assert state.portfolio.get_entry(1).holdings == pytest.approx(0.75)
        assert confirm.messages == []
        assert "Recorded 2 purchase(s) of 'Bitcoin'." in printed()

    def test_buy_creates_entry_after_confirmation(self, dispatcher, state: AppState, confirm) -> None:
        result = dispatch(dispatcher, "portfolio buy eth 2 1800")

        assert result.status == DispatchStatus.SUCCESS
        assert confirm.messages == ["Create new entry for 'Ethereum'?"]
        assert state.portfolio.get_entry(1027).holdings == 2.0

    def test_buy_declined(self, dispatcher, state: AppState, confirm) -> None:
        confirm.answer = False
        result = dispatch(dispatcher, "portfolio buy eth 2 1800")
        assert result.status == DispatchStatus.SUCCESS
        assert not state.portfolio.has_entry(1027)

    def test_even_argument_count(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "portfolio buy btc 1 100 2")
        assert result.status == DispatchStatus.INVALID_ARGUMENTS
        assert "Invalid format: number of arguments must be odd." in printed()

    def test_too_few_arguments(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "portfolio sell btc")
        assert result.status == DispatchStatus.INVALID_ARGUMENTS
        assert "should be between 3 and 11" in printed()

    def test_non_numeric_amount(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "portfolio buy btc lots 100")
        assert result.status == DispatchStatus.INVALID_ARGUMENTS
        assert "Invalid amount: 'lots'." in printed()

    def test_sell_insufficient(self, dispatcher, state: AppState, printed) -> None:
        state.portfolio.buy(1, [(1.0, 100.0)], create=True)
        result = dispatch(dispatcher, "portfolio sell btc 2 150")
        assert result.status == DispatchStatus.EXECUTION_FAILED
        assert "Insufficient holdings for 'Bitcoin'" in printed()

    def test_sell_without_entry(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "portfolio sell eth 1 100")
        assert result.status == DispatchStatus.EXECUTION_FAILED
        assert "There's no entry in portfolio manager for 'Ethereum'." in printed()


class TestUndo:
    def test_undo_last_change(self, dispatcher, state: AppState) -> None:
        dispatch(dispatcher, "portfolio add btc")
        dispatch(dispatcher, "portfolio remove btc")

        assert dispatch(dispatcher, "portfolio undo").status == DispatchStatus.SUCCESS
        assert state.portfolio.coin_ids == [1]

    def test_nothing_to_undo(self, dispatcher, printed) -> None:
        result = dispatch(dispatcher, "portfolio undo")
        assert result.status == DispatchStatus.EXECUTION_FAILED
        assert "No changes were recently made to portfolio." in printed()
