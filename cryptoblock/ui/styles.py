"""
Styles and Colors for CryptoBlock
Color palette and prompt styling constants shared by the console and prompts
"""

from prompt_toolkit.styles import Style as PromptStyle

COLORS = {
    # Primary colors
    "primary": "#F7931A",       # Bitcoin orange, borders and prompt
    "secondary": "#5B89F7",     # Blue for commands
    "accent": "#3B8EEA",        # Menu header

    # Status colors
    "success": "#4EC9A1",
    "warning": "#FFC107",
    "error": "#F14C4C",

    # Text colors
    "text": "#E4E4E4",
    "muted": "#666666",

    # Background colors
    "bg_elevated": "#1a1a2e",
    "bg_hover": "#333333",
    "bg_selected": "#2d2d2d",

    # Market data
    "gain": "#2EA043",          # Positive price change
    "loss": "#CF222E",          # Negative price change

    # Confirm prompt buttons
    "yes": "#4EC9A1",
    "no": "#F14C4C",
}

# Prompt toolkit styles for the input line and interactive components
STYLES = PromptStyle.from_dict({
    # Input prompt
    "prompt": f"bold {COLORS['text']}",
    "bottom-toolbar": f"bg:{COLORS['bg_elevated']} {COLORS['muted']}",

    # Completion menu
    "completion-menu": f"bg:{COLORS['bg_hover']} #eeeeee",
    "completion-menu.completion": f"bg:{COLORS['bg_hover']} #eeeeee",
    "completion-menu.completion.current": f"bg:{COLORS['primary']} #000000",

    # Profile menu
    "header": f"bg:{COLORS['accent']} #ffffff bold",
    "selected": f"bg:{COLORS['bg_selected']}",
    "pointer": f"fg:{COLORS['accent']} bold",
    "badge": f"bg:{COLORS['primary']} #000000",
    "selected-badge": f"bg:{COLORS['primary']} #ffffff bold",
    "hint": f"fg:{COLORS['muted']}",

    # Confirm prompt
    "confirm-title": f"bold {COLORS['warning']}",
    "confirm-button": f"bg:{COLORS['bg_hover']} {COLORS['text']}",
    "confirm-yes": f"bg:{COLORS['yes']} #000000 bold",
    "confirm-no": f"bg:{COLORS['no']} #ffffff bold",
})


def change_color(value: float) -> str:
    """Color for a signed percentage change."""
    if value > 0:
        return COLORS["gain"]
    if value < 0:
        return COLORS["loss"]
    return COLORS["muted"]
