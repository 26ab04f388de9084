"""
UI Components for CryptoBlock
Interactive terminal prompts used by commands

Components:
- ProfileMenu: Keyboard-driven reporting profile picker
- ConfirmPrompt: Yes/no confirmation
"""

from typing import Optional, List, Sequence, Tuple

from prompt_toolkit import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout.containers import Window, HSplit
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.layout import Layout

from cryptoblock.settings.profiles import ReportingProfile
from .styles import STYLES


def _run_inline(render, kb: KeyBindings, height: int):
    """Run a small non-fullscreen application below the prompt."""
    return Application(
        layout=Layout(HSplit([Window(content=FormattedTextControl(text=render), height=height)])),
        key_bindings=kb,
        style=STYLES,
        full_screen=False,
    ).run_async()


class ProfileMenu:
    """
    Picker for reporting profiles.

    Up/Down (or j/k) move the pointer, Enter picks, and a profile's own
    index key (0, 1, 2 ...) picks it directly. Esc cancels.

    Usage:
        profile = await ProfileMenu(REPORTING_PROFILES, current=settings.reporting_profile).run()
    """

    def __init__(
        self,
        profiles: Sequence[ReportingProfile],
        current: Optional[ReportingProfile] = None,
        title: str = "Select Reporting Profile",
    ):
        if not profiles:
            raise ValueError("ProfileMenu needs at least one profile")
        self.title = title
        self.profiles = list(profiles)
        self.current = current
        self.position = self.profiles.index(current) if current in self.profiles else 0

    @property
    def highlighted(self) -> ReportingProfile:
        return self.profiles[self.position]

    def move(self, step: int) -> None:
        self.position = (self.position + step) % len(self.profiles)

    def by_key(self, key: str) -> Optional[ReportingProfile]:
        """The profile whose index is typed as ``key``."""
        for profile in self.profiles:
            if str(profile.index) == key:
                return profile
        return None

    def _get_formatted_text(self) -> List[Tuple[str, str]]:
        title_width = max(len(p.title) for p in self.profiles)
        lines = [("", "\n"), ("class:header", f" {self.title} "), ("", "\n\n")]

        for profile in self.profiles:
            highlighted = profile is self.highlighted
            row = "class:selected" if highlighted else ""
            lines.append(("class:pointer", " > " if highlighted else "   "))
            lines.append((f"{row} class:hint", f"{profile.index}  "))
            lines.append((f"{row} bold cyan" if highlighted else "cyan", profile.title.ljust(title_width)))
            lines.append((f"{row} class:hint", "  "))
            lines.append((row, profile.description))
            if profile == self.current:
                lines.append(("class:selected-badge" if highlighted else "class:badge", " current "))
            lines.append(("", "\n"))

        lines.append(("", "\n"))
        lines.append(("class:hint", " ↑/↓ Navigate · Enter or index Confirm · Esc Cancel"))
        return lines

    async def run(self) -> Optional[ReportingProfile]:
        """Show the menu; return the chosen profile, or None if cancelled."""
        kb = KeyBindings()
        chosen: Optional[ReportingProfile] = None

        @kb.add("up")
        @kb.add("k")
        def _up(event):
            self.move(-1)

        @kb.add("down")
        @kb.add("j")
        def _down(event):
            self.move(1)

        @kb.add("enter")
        def _confirm(event):
            nonlocal chosen
            chosen = self.highlighted
            event.app.exit()

        @kb.add("escape")
        @kb.add("c-c")
        def _cancel(event):
            event.app.exit()

        @kb.add("<any>")
        def _pick(event):
            nonlocal chosen
            profile = self.by_key(event.key_sequence[0].data)
            if profile is not None:
                chosen = profile
                event.app.exit()

        await _run_inline(self._get_formatted_text, kb, height=len(self.profiles) + 5)
        return chosen


class ConfirmPrompt:
    """
    Yes/no question; Left/Right toggle, Enter answers, y/n answer directly.
    Esc counts as "no".

    Usage:
        create = await ConfirmPrompt("Create new entry for 'Bitcoin'?", default=True).run()
    """

    def __init__(self, message: str, default: bool = False):
        self.message = message
        self.answer = default

    def toggle(self) -> None:
        self.answer = not self.answer

    def _get_formatted_text(self) -> List[Tuple[str, str]]:
        yes_style = "class:confirm-yes" if self.answer else "class:confirm-button"
        no_style = "class:confirm-button" if self.answer else "class:confirm-no"
        return [
            ("", "\n"),
            ("class:confirm-title", f" {self.message} "),
            ("", "\n\n "),
            (yes_style, " Yes "),
            ("", "  "),
            (no_style, " No "),
            ("", "\n\n"),
            ("class:hint", " ←/→ Navigate · Enter Confirm · y/n"),
        ]

    async def run(self) -> bool:
        """Show the prompt and return the answer."""
        kb = KeyBindings()

        @kb.add("left")
        @kb.add("right")
        @kb.add("tab")
        def _toggle(event):
            self.toggle()

        @kb.add("enter")
        def _confirm(event):
            event.app.exit()

        @kb.add("y")
        def _yes(event):
            self.answer = True
            event.app.exit()

        @kb.add("n")
        @kb.add("escape")
        @kb.add("c-c")
        def _no(event):
            self.answer = False
            event.app.exit()

        await _run_inline(self._get_formatted_text, kb, height=5)
        return self.answer
