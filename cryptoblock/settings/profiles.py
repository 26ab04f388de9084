"""
Reporting profiles

A reporting profile decides which kinds of console messages are shown.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional


class ReportType(str, Enum):
    """Kinds of messages written to the console."""
    EXCEPTION = "exception"                  # Tracebacks of unexpected errors
    SYSTEM = "system"                        # Startup and housekeeping notices
    COMMAND_EXECUTION = "command_execution"  # Command results and diagnostics
    DATA = "data"                            # Tables and other requested data


@dataclass(frozen=True)
class ReportingProfile:
    """A named set of visible report types."""
    index: int
    title: str
    description: str
    report_types: FrozenSet[ReportType]

    def allows(self, report_type: ReportType) -> bool:
        return report_type in self.report_types

    @property
    def menu_text(self) -> str:
        return f"{self.title} - {self.description}"


DEBUGGING = ReportingProfile(
    index=0,
    title="Debugging",
    description="All messages, including exception details.",
    report_types=frozenset(ReportType),
)

USER_EXTENDED = ReportingProfile(
    index=1,
    title="User-extended",
    description="Command output together with system notices.",
    report_types=frozenset({ReportType.SYSTEM, ReportType.COMMAND_EXECUTION, ReportType.DATA}),
)

USER = ReportingProfile(
    index=2,
    title="User",
    description="Command output only.",
    report_types=frozenset({ReportType.COMMAND_EXECUTION, ReportType.DATA}),
)

REPORTING_PROFILES: List[ReportingProfile] = [DEBUGGING, USER_EXTENDED, USER]

DEFAULT_PROFILE = USER


def get_profile(index: int) -> ReportingProfile:
    """Return the profile with the given index, or raise KeyError."""
    for profile in REPORTING_PROFILES:
        if profile.index == index:
            return profile
    raise KeyError(index)


def find_profile(name: str) -> Optional[ReportingProfile]:
    """Find a profile by index ("0") or title ("user-extended")."""
    name = name.strip().lower()
    if name.isdecimal():
        try:
            return get_profile(int(name))
        except KeyError:
            return None
    for profile in REPORTING_PROFILES:
        if profile.title.lower() == name:
            return profile
    return None
