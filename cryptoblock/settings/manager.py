"""
Settings Manager for CryptoBlock
Persists the reporting profile and user defined command aliases
"""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .profiles import DEFAULT_PROFILE, ReportingProfile, get_profile


class SettingsError(Exception):
    """Base class for settings errors."""


class SettingsStorageError(SettingsError):
    """Raised when settings cannot be written to disk."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Could not save settings to '{path}': {reason}")
        self.path = path


class UserCommandExistsError(SettingsError):
    def __init__(self, alias: str):
        super().__init__(
            f"Cannot add command: A user defined command with alias '{alias}' already exists."
        )
        self.alias = alias


class UserCommandNotFoundError(SettingsError):
    def __init__(self, alias: str):
        super().__init__(f"There's no user defined command with alias '{alias}'.")
        self.alias = alias


@dataclass
class UserDefinedCommand:
    """An alias that expands to a full command line."""
    alias: str
    command: str
    added_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UserDefinedCommand":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


class SettingsManager:
    """
    Manages persistent user settings.

    Features:
    - Reporting profile selection
    - User defined command aliases (add, view, remove, clear)
    - Load/save from a JSON settings file

    Usage:
        settings = SettingsManager(Path("settings.json"))
        settings.add_user_command("btc", "ticker bitcoin")
        settings.get_user_command("btc").command   # "ticker bitcoin"
    """

    def __init__(self, settings_path: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            settings_path: Path to persist settings, or None to keep them in memory
        """
        self.settings_path = settings_path
        self._profile: ReportingProfile = DEFAULT_PROFILE
        self._user_commands: Dict[str, UserDefinedCommand] = {}

        self._load()

    def _load(self) -> None:
        """Load settings from file. Missing or malformed files give defaults."""
        if self.settings_path is None or not self.settings_path.exists():
            return

        try:
            data = json.loads(self.settings_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return
        if not isinstance(data, dict):
            return

        try:
            self._profile = get_profile(int(data.get("reporting_profile", DEFAULT_PROFILE.index)))
        except (KeyError, TypeError, ValueError):
            self._profile = DEFAULT_PROFILE

        for item in data.get("user_commands", []):
            try:
                command = UserDefinedCommand.from_dict(item)
            except TypeError:
                continue
            self._user_commands[command.alias.lower()] = command

    def _save(self) -> None:
        """Save settings to file."""
        if self.settings_path is None:
            return

        data = {
            "reporting_profile": self._profile.index,
            "user_commands": [cmd.to_dict() for cmd in self._user_commands.values()],
            "updated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            self.settings_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding="utf-8"
            )
        except OSError as e:
            raise SettingsStorageError(self.settings_path, str(e)) from e

    # ─────────────────────────────────────────────────────────────────────
    # Reporting profile
    # ─────────────────────────────────────────────────────────────────────

    @property
    def reporting_profile(self) -> ReportingProfile:
        return self._profile

    def set_reporting_profile(self, profile: ReportingProfile) -> None:
        previous = self._profile
        self._profile = profile
        try:
            self._save()
        except SettingsStorageError:
            self._profile = previous
            raise

    # ─────────────────────────────────────────────────────────────────────
    # User defined commands
    # ─────────────────────────────────────────────────────────────────────

    @property
    def user_commands(self) -> List[UserDefinedCommand]:
        return sorted(self._user_commands.values(), key=lambda cmd: cmd.alias)

    def user_command_exists(self, alias: str) -> bool:
        return alias.lower() in self._user_commands

    def get_user_command(self, alias: str) -> UserDefinedCommand:
        try:
            return self._user_commands[alias.lower()]
        except KeyError:
            raise UserCommandNotFoundError(alias) from None

    def add_user_command(self, alias: str, command: str) -> UserDefinedCommand:
        alias = alias.lower()
        if alias in self._user_commands:
            raise UserCommandExistsError(alias)

        user_command = UserDefinedCommand(alias=alias, command=command)
        self._user_commands[alias] = user_command
        try:
            self._save()
        except SettingsStorageError:
            del self._user_commands[alias]
            raise
        return user_command

    def remove_user_command(self, alias: str) -> UserDefinedCommand:
        removed = self.get_user_command(alias)
        del self._user_commands[removed.alias]
        try:
            self._save()
        except SettingsStorageError:
            self._user_commands[removed.alias] = removed
            raise
        return removed

    def clear_user_commands(self) -> int:
        """Remove every alias. Returns how many were removed."""
        previous = dict(self._user_commands)
        self._user_commands.clear()
        try:
            self._save()
        except SettingsStorageError:
            self._user_commands = previous
            raise
        return len(previous)

    def expand(self, line: str) -> str:
        """
        Expand a leading user defined alias.

        "btc usd" with alias btc -> "ticker bitcoin" becomes "ticker bitcoin usd".
        Lines that don't start with an alias are returned unchanged.
        """
        parts = line.strip().split(maxsplit=1)
        if not parts or not self.user_command_exists(parts[0]):
            return line
        expanded = self.get_user_command(parts[0]).command
        if len(parts) > 1:
            expanded = f"{expanded} {parts[1]}"
        return expanded
