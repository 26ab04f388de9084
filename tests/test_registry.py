"""Tests for command prefixes and registries."""

from __future__ import annotations

from typing import List

import pytest

from cryptoblock.commands import (
    AppState,
    ArgumentCountConstraint,
    Command,
    CommandRegistry,
    DuplicatePrefixError,
    Prefix,
)


class RecordingCommand(Command):
    """Remembers the arguments of every execution."""

    constraints = (ArgumentCountConstraint(0, 2),)

    def __init__(self, state: AppState, prefix: Prefix, result: bool = True):
        super().__init__(state, prefix)
        self.result = result
        self.calls: List[List[str]] = []

    async def execute(self, arguments: List[str]) -> bool:
        self.calls.append(arguments)
        return self.result


class TestPrefix:
    def test_words_are_lowercased_and_split(self) -> None:
        assert Prefix("Settings Get").words == ("settings", "get")

    def test_extend_composes_parent_and_suffix(self) -> None:
        settings_get = Prefix("settings").extend("get")
        full = settings_get.extend("reporting", "profile")
        assert str(full) == "settings get reporting profile"
        assert len(full) == 4
        assert settings_get.words == ("settings", "get")

    def test_matches_is_word_exact_and_case_insensitive(self) -> None:
        prefix = Prefix("status connection")
        assert prefix.matches(["STATUS", "Connection", "extra"])
        assert not prefix.matches(["status", "connect"])
        assert not prefix.matches(["status"])

    def test_equality_and_hash(self) -> None:
        assert Prefix("a b") == Prefix("a").extend("b")
        assert len({Prefix("a b"), Prefix("A", "B")}) == 1

    def test_empty_prefix_rejected(self) -> None:
        with pytest.raises(ValueError):
            Prefix("  ")


class TestCommandRegistry:
    def test_duplicate_prefix_raises(self, state: AppState) -> None:
        registry = CommandRegistry("System", [RecordingCommand(state, Prefix("status"))])
        with pytest.raises(DuplicatePrefixError, match="status"):
            registry.register(RecordingCommand(state, Prefix("STATUS")))

    def test_extension_prefixes_can_coexist(self, state: AppState) -> None:
        registry = CommandRegistry("System", [
            RecordingCommand(state, Prefix("settings get")),
            RecordingCommand(state, Prefix("settings get reporting profile")),
        ])
        assert len(registry) == 2

    def test_longest_match_wins(self, state: AppState) -> None:
        short = RecordingCommand(state, Prefix("status"))
        long = RecordingCommand(state, Prefix("status connection"))
        registry = CommandRegistry("System", [short, long])

        assert registry.try_resolve(["status", "connection"]) == (long, 2)
        assert registry.try_resolve(["status", "connection", "x"]) == (long, 2)
        assert registry.try_resolve(["status", "other"]) == (short, 1)
        assert registry.try_resolve(["Status"]) == (short, 1)

    def test_no_match(self, state: AppState) -> None:
        registry = CommandRegistry("System", [RecordingCommand(state, Prefix("status"))])
        assert registry.try_resolve(["banana"]) is None
        assert registry.try_resolve([]) is None

    def test_commands_are_listed_by_prefix(self, state: AppState) -> None:
        registry = CommandRegistry("Portfolio", [
            RecordingCommand(state, Prefix("portfolio view")),
            RecordingCommand(state, Prefix("portfolio add")),
        ])
        assert [str(p) for p in registry.prefixes] == ["portfolio add", "portfolio view"]
        assert Prefix("portfolio add") in registry
