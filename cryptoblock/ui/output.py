"""
Console output sink

ConsoleOutput wraps a rich Console and is handed to every command through
AppState. Each message has a ReportType; the active reporting profile
decides whether it is printed. Unexpected exceptions are also appended to a
JSONL error log.
"""

import json
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.traceback import Traceback

from cryptoblock.settings.profiles import DEFAULT_PROFILE, ReportType, ReportingProfile
from .styles import COLORS


class ConsoleOutput:
    """
    Profile-filtered console writer.

    Usage:
        output = ConsoleOutput(Console())
        output.success("Portfolio entry for 'bitcoin' was added.")
        output.error("No internet connection.")
        output.data(table)
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        profile: ReportingProfile = DEFAULT_PROFILE,
        error_log_path: Optional[Path] = None,
    ):
        self.console = console or Console()
        self.profile = profile
        self.error_log_path = error_log_path

    def is_visible(self, report_type: ReportType) -> bool:
        return self.profile.allows(report_type)

    def _print(self, text: str, report_type: ReportType) -> None:
        if self.is_visible(report_type):
            self.console.print(text)

    def success(self, message: str, report_type: ReportType = ReportType.COMMAND_EXECUTION) -> None:
        self._print(f"[{COLORS['success']}]✓ {escape(message)}[/{COLORS['success']}]", report_type)

    def error(self, message: str, report_type: ReportType = ReportType.COMMAND_EXECUTION) -> None:
        self._print(f"[{COLORS['error']}]✗ {escape(message)}[/{COLORS['error']}]", report_type)

    def warning(self, message: str, report_type: ReportType = ReportType.COMMAND_EXECUTION) -> None:
        self._print(f"[{COLORS['warning']}]{escape(message)}[/{COLORS['warning']}]", report_type)

    def notice(self, message: str, report_type: ReportType = ReportType.COMMAND_EXECUTION) -> None:
        self._print(escape(message), report_type)

    def system(self, message: str) -> None:
        self._print(f"[dim]{escape(message)}[/dim]", ReportType.SYSTEM)

    def data(self, renderable: RenderableType) -> None:
        if self.is_visible(ReportType.DATA):
            self.console.print(renderable)

    def exception(self, exc: BaseException, line: Optional[str] = None) -> None:
        """
        Report an unexpected exception.

        The user always gets a one-line notice; the traceback is printed only
        when the profile shows exceptions, and it is written to the error log
        when one is configured.
        """
        logged = self._append_error_log(exc, line)

        message = "An unexpected error occurred."
        if logged:
            message += f" Details were written to '{self.error_log_path}'."
        self.error(message)

        if self.is_visible(ReportType.EXCEPTION):
            self.console.print(Traceback.from_exception(type(exc), exc, exc.__traceback__))

    def _append_error_log(self, exc: BaseException, line: Optional[str]) -> bool:
        if self.error_log_path is None:
            return False

        record = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "type": type(exc).__name__,
            "message": str(exc),
            "line": line,
            "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        }
        try:
            self.error_log_path.parent.mkdir(parents=True, exist_ok=True)
            with self.error_log_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(record, ensure_ascii=False) + "\n")
        except OSError as e:
            self.warning(f"Could not write error log: {e}")
            return False
        return True
