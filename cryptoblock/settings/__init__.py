"""
User settings: reporting profiles and user defined commands
"""

from .profiles import (
    ReportType,
    ReportingProfile,
    REPORTING_PROFILES,
    DEFAULT_PROFILE,
    get_profile,
    find_profile,
)
from .manager import (
    SettingsManager,
    SettingsError,
    SettingsStorageError,
    UserCommandExistsError,
    UserCommandNotFoundError,
    UserDefinedCommand,
)

__all__ = [
    "ReportType",
    "ReportingProfile",
    "REPORTING_PROFILES",
    "DEFAULT_PROFILE",
    "get_profile",
    "find_profile",
    "SettingsManager",
    "SettingsError",
    "SettingsStorageError",
    "UserCommandExistsError",
    "UserCommandNotFoundError",
    "UserDefinedCommand",
]
