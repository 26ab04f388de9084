"""
Command history with a fixed memory ceiling.

This module provides:
- An in-memory SearchableStack of the most recent command lines
- Append-only JSONL storage so history survives restarts
- Loading the newest entries back on startup
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from .stack import SearchableStack


@dataclass
class HistoryEntry:
    """A single dispatched command line."""
    timestamp: datetime
    line: str
    status: str | None = None

    def to_dict(self) -> dict:
        return {
            "ts": self.timestamp.isoformat(),
            "line": self.line,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        return cls(
            timestamp=datetime.fromisoformat(data["ts"].replace("Z", "+00:00")),
            line=data["line"],
            status=data.get("status"),
        )


class CommandHistory:
    """
    Keeps the most recent command lines.

    Features:
    - Bounded in-memory stack (oldest lines drop off silently)
    - Append-only JSONL storage
    - Automatic file rotation
    """

    def __init__(
        self,
        history_path: str | Path | None = "history.jsonl",
        capacity: int = 100,
        max_file_size_mb: float = 5.0,
    ):
        """
        Initialize the command history.

        Args:
            history_path: Path to the JSONL file, or None to keep history in memory only
            capacity: Maximum number of lines kept in memory
            max_file_size_mb: Max file size before rotation
        """
        self.history_path = Path(history_path) if history_path else None
        self.max_file_size = int(max_file_size_mb * 1024 * 1024)
        self._stack: SearchableStack[HistoryEntry] = SearchableStack(capacity)
        self._load()

    @property
    def capacity(self) -> int:
        return self._stack.capacity

    def __len__(self) -> int:
        return self._stack.count

    def _load(self) -> None:
        """Push the newest stored entries back onto the stack, oldest first."""
        for entry in self.iter_entries():
            self._stack.push(entry)

    def append(self, line: str, status: str | None = None) -> HistoryEntry:
        """Record a dispatched line."""
        entry = HistoryEntry(
            timestamp=datetime.now(timezone.utc),
            line=line,
            status=status,
        )
        self._stack.push(entry)

        if self.history_path is not None:
            self._maybe_rotate()
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            with self.history_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

        return entry

    def recent(self, count: int | None = None) -> list[HistoryEntry]:
        """Return up to ``count`` entries, most recent first."""
        entries = self._stack.to_list()
        if count is None:
            return entries
        return entries[:max(count, 0)]

    def last(self) -> HistoryEntry | None:
        if self._stack.empty:
            return None
        return self._stack.top_element()

    def clear(self) -> int:
        """Forget all entries, in memory and on disk. Returns how many were dropped."""
        dropped = self._stack.count
        self._stack.clear()
        if self.history_path is not None and self.history_path.exists():
            self.history_path.unlink()
        return dropped

    def _maybe_rotate(self) -> None:
        """Rotate the history file if it's too large."""
        if not self.history_path.exists():
            return

        if self.history_path.stat().st_size > self.max_file_size:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            rotated_path = self.history_path.with_suffix(f".{timestamp}.jsonl")
            self.history_path.rename(rotated_path)

    def iter_entries(self) -> Iterator[HistoryEntry]:
        """Iterate over stored entries, oldest first."""
        if self.history_path is None or not self.history_path.exists():
            return

        with self.history_path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    yield HistoryEntry.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, ValueError):
                    continue
