"""
System Commands

Handles application-level commands:
- status, status connection - Show application state / check connectivity
- settings get|set reporting profile - Show or change the reporting profile
- user commands add|view|remove|clear - Manage user defined aliases
- history view|clear - Show or forget recent command lines
- help - List all commands
- exit - Exit application
"""

from typing import List

from rich.table import Table
from rich.box import ROUNDED
from rich.markup import escape

from cryptoblock.settings import (
    REPORTING_PROFILES,
    SettingsError,
    find_profile,
)
from cryptoblock.ui.components import ProfileMenu
from cryptoblock.ui.styles import COLORS
from .arguments import ArgumentCountConstraint
from .base import Command, Prefix

SYSTEM_LABEL = "System"

STATUS = Prefix("status")
SETTINGS_GET = Prefix("settings").extend("get")
SETTINGS_SET = Prefix("settings").extend("set")
USER_COMMANDS = Prefix("user", "commands")
HISTORY = Prefix("history")


class StatusCommand(Command):
    """Handles status command - summary of application state."""

    prefix = STATUS
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Show application status"

    async def execute(self, arguments: List[str]) -> bool:
        state = self.state
        listings = state.listings
        client = state.market_client

        table = Table(show_header=False, box=ROUNDED, border_style=COLORS["primary"])
        table.add_column(style=COLORS["secondary"], no_wrap=True)
        table.add_column()

        table.add_row("Reporting profile", state.settings.reporting_profile.title)
        table.add_row(
            "Coin listings",
            f"{len(listings)} cached" if listings is not None and listings.initialized else "not loaded",
        )
        table.add_row(
            "API key",
            "configured" if client is not None and client.is_configured else "[dim]missing[/dim]",
        )
        table.add_row("Portfolio entries", str(len(state.portfolio)))
        table.add_row("History", f"{len(state.history)}/{state.history.capacity}")
        table.add_row("Data directory", escape(str(state.data_dir)))

        self.output.data(table)
        return True


class ConnectionStatusCommand(Command):
    """Handles status connection command - check internet connectivity."""

    prefix = STATUS.extend("connection")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Check internet connectivity"

    async def execute(self, arguments: List[str]) -> bool:
        self.output.notice("Checking internet connectivity ..")
        if await self.state.market_client.check_connectivity():
            self.output.success("Device is connected to internet.")
            return True
        self.output.error("No internet connection.")
        return False


class GetReportingProfileCommand(Command):
    """Handles settings get reporting profile command."""

    prefix = SETTINGS_GET.extend("reporting", "profile")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Show the current reporting profile"

    async def execute(self, arguments: List[str]) -> bool:
        profile = self.state.settings.reporting_profile
        self.output.notice(f"Current Reporting Profile: '{profile.title}'.")
        return True


class SetReportingProfileCommand(Command):
    """Handles settings set reporting profile command - choose which messages are shown."""

    prefix = SETTINGS_SET.extend("reporting", "profile")
    constraints = (ArgumentCountConstraint(0, 1),)
    usage = "[profile]"
    description = "Change the reporting profile"

    async def execute(self, arguments: List[str]) -> bool:
        if arguments:
            profile = find_profile(arguments[0])
            if profile is None:
                choices = ", ".join(p.menu_text for p in REPORTING_PROFILES)
                self.output.error(f"Unknown reporting profile '{arguments[0]}'. Choose one of: {choices}.")
                return False
        else:
            profile = await ProfileMenu(REPORTING_PROFILES, current=self.state.settings.reporting_profile).run()
            if profile is None:
                self.output.notice("Reporting profile unchanged.")
                return True

        try:
            self.state.settings.set_reporting_profile(profile)
        except SettingsError as e:
            self.output.error(str(e))
            return False

        self.output.profile = profile
        self.output.success(f"Reporting Profile set to '{profile.title}'.")
        return True


class AddUserCommandCommand(Command):
    """Handles user commands add command - define an alias for a command line."""

    prefix = USER_COMMANDS.extend("add")
    constraints = (ArgumentCountConstraint(2, 20),)
    usage = "<alias> <command...>"
    description = "Add a user defined command"

    async def execute(self, arguments: List[str]) -> bool:
        alias = arguments[0].lower()
        command_line = " ".join(arguments[1:])
        dispatcher = self.state.dispatcher

        reserved = dispatcher.reserved_word(alias)
        if reserved is not None:
            self.output.error(f"Cannot add command: command prefix '{reserved}' is reserved.")
            return False

        if dispatcher.resolve(arguments[1:]) is None:
            self.output.error(f"Cannot add command: '{command_line}' is not a recognized command.")
            return False

        try:
            self.state.settings.add_user_command(alias, command_line)
        except SettingsError as e:
            self.output.error(str(e))
            return False

        self.output.success(f"User Defined Command with alias '{alias}' was added successfully.")
        return True


class ViewUserCommandsCommand(Command):
    """Handles user commands view command."""

    prefix = USER_COMMANDS.extend("view")
    constraints = (ArgumentCountConstraint(0, 1),)
    usage = "[alias]"
    description = "Show user defined commands"

    async def execute(self, arguments: List[str]) -> bool:
        settings = self.state.settings
        try:
            commands = [settings.get_user_command(arguments[0])] if arguments else settings.user_commands
        except SettingsError as e:
            self.output.error(str(e))
            return False

        if not commands:
            self.output.notice("No User Defined Commands were added.")
            return True

        table = Table(title="User Defined Commands", box=ROUNDED, border_style=COLORS["primary"])
        table.add_column("Alias", style=COLORS["secondary"], no_wrap=True)
        table.add_column("Command")
        table.add_column("Added", style="dim")
        for command in commands:
            table.add_row(escape(command.alias), escape(command.command), command.added_at)

        self.output.data(table)
        return True


class RemoveUserCommandCommand(Command):
    """Handles user commands remove command."""

    prefix = USER_COMMANDS.extend("remove")
    constraints = (ArgumentCountConstraint(1, 1),)
    usage = "<alias>"
    description = "Remove a user defined command"

    async def execute(self, arguments: List[str]) -> bool:
        try:
            removed = self.state.settings.remove_user_command(arguments[0])
        except SettingsError as e:
            self.output.error(str(e))
            return False

        self.output.success(f"User Defined Command with alias '{removed.alias}' was removed successfully.")
        return True


class ClearUserCommandsCommand(Command):
    """Handles user commands clear command."""

    prefix = USER_COMMANDS.extend("clear")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Remove all user defined commands"

    async def execute(self, arguments: List[str]) -> bool:
        try:
            removed = self.state.settings.clear_user_commands()
        except SettingsError as e:
            self.output.error(str(e))
            return False

        if removed == 0:
            self.output.notice("No User Defined Commands were added.")
        else:
            self.output.success(f"Removed {removed} User Defined Command(s).")
        return True


class ViewHistoryCommand(Command):
    """Handles history view command - show recent command lines."""

    prefix = HISTORY.extend("view")
    constraints = (ArgumentCountConstraint(0, 1),)
    usage = "[count]"
    description = "Show recent commands"

    async def execute(self, arguments: List[str]) -> bool:
        history = self.state.history
        count = None
        if arguments:
            if not arguments[0].isdecimal() or int(arguments[0]) == 0:
                self.output.error(f"Invalid count: '{arguments[0]}'. Expected a positive whole number.")
                return False
            count = int(arguments[0])

        entries = history.recent(count)
        if not entries:
            self.output.notice("Command history is empty.")
            return True

        table = Table(title="Recent Commands", box=ROUNDED, border_style=COLORS["primary"])
        table.add_column("#", justify="right", style="dim")
        table.add_column("Time", style="dim", no_wrap=True)
        table.add_column("Command", style=COLORS["secondary"])
        table.add_column("Result")
        for index, entry in enumerate(entries):
            table.add_row(
                str(index),
                entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
                escape(entry.line),
                entry.status or "",
            )

        self.output.data(table)
        return True


class ClearHistoryCommand(Command):
    """Handles history clear command."""

    prefix = HISTORY.extend("clear")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Forget recent commands"

    async def execute(self, arguments: List[str]) -> bool:
        try:
            dropped = self.state.history.clear()
        except OSError as e:
            self.output.error(f"Could not clear history: {e}")
            return False
        self.output.success(f"Cleared {dropped} history entr{'y' if dropped == 1 else 'ies'}.")
        return True


class HelpCommand(Command):
    """Handles help command - list all commands."""

    prefix = Prefix("help")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Show all commands"

    async def execute(self, arguments: List[str]) -> bool:
        for registry in self.state.dispatcher.registries:
            grid = Table(
                title=f"{registry.label} commands",
                title_justify="left",
                show_header=False,
                box=None,
                padding=(0, 2),
            )
            grid.add_column(style=COLORS["secondary"], no_wrap=True)
            grid.add_column(style="dim", no_wrap=True)
            grid.add_column(style="dim white")
            for command in registry.commands:
                bounds = command.argument_range
                grid.add_row(
                    escape(f"{command.prefix} {command.usage}".rstrip()),
                    escape(f"[{bounds[0]}-{bounds[1]}]") if bounds else "",
                    command.description,
                )
            self.output.data(grid)

        aliases = len(self.state.settings.user_commands)
        if aliases:
            self.output.notice(f"{aliases} user defined command(s); see 'user commands view'.")
        return True


class ExitCommand(Command):
    """Handles exit command - exit application."""

    prefix = Prefix("exit")
    constraints = (ArgumentCountConstraint(0, 0),)
    description = "Exit the application"

    async def execute(self, arguments: List[str]) -> bool:
        self.output.console.print("\n[dim]Goodbye! 👋[/dim]")
        self.state.request_exit()
        return True


SYSTEM_COMMANDS = [
    StatusCommand,
    ConnectionStatusCommand,
    GetReportingProfileCommand,
    SetReportingProfileCommand,
    AddUserCommandCommand,
    ViewUserCommandsCommand,
    RemoveUserCommandCommand,
    ClearUserCommandsCommand,
    ViewHistoryCommand,
    ClearHistoryCommand,
    HelpCommand,
    ExitCommand,
]
