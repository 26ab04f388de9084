"""
UI Components for CryptoBlock
Console output, styles and interactive prompts
"""

from .components import ProfileMenu, ConfirmPrompt
from .output import ConsoleOutput
from .styles import COLORS, STYLES, change_color

__all__ = [
    "ProfileMenu",
    "ConfirmPrompt",
    "ConsoleOutput",
    "COLORS",
    "STYLES",
    "change_color",
]
