"""Persisted command history with a navigation cursor."""

from __future__ import annotations

import os
import sys
from typing import List, Optional

DEFAULT_HISTFILE = "~/.pyrosh_history"


def default_history_path() -> str:
    return os.path.expanduser(os.environ.get("PYROSH_HISTFILE") or DEFAULT_HISTFILE)


class HistoryStore:
    """Ordered log of accepted input lines.

    The cursor lives in ``[0, len(entries)]``; ``len(entries)`` means "past the
    newest entry", i.e. an empty in-progress buffer. Every append moves the
    cursor back there and rewrites the backing file (when one is configured).
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path: Optional[str] = path
        self.entries: List[str] = []
        self.cursor: int = 0

    def load(self) -> None:
        if not self.path:
            return
        try:
            with open(self.path, "r", encoding="utf-8", errors="replace") as f:
                self.entries = [line.rstrip("\n") for line in f if line.strip()]
        except FileNotFoundError:
            self.entries = []
        except OSError as e:
            sys.stderr.write(f"pyrosh: history: cannot read {self.path}: {e.strerror}\n")
            sys.stderr.flush()
            self.entries = []
        self.cursor = len(self.entries)

    def save(self) -> None:
        if not self.path:
            return
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                for entry in self.entries:
                    f.write(entry + "\n")
        except OSError as e:
            sys.stderr.write(f"pyrosh: history: cannot write {self.path}: {e.strerror}\n")
            sys.stderr.flush()

    def append(self, line: str) -> None:
        if not line.strip():
            return
        self.entries.append(line)
        self.cursor = len(self.entries)
        self.save()

    def previous(self) -> Optional[str]:
        """Step the cursor back one entry; None when history is empty."""
        if not self.entries:
            return None
        self.cursor = max(0, self.cursor - 1)
        return self.entries[self.cursor]

    def next(self) -> str:
        """Step the cursor forward; past the newest entry yields an empty buffer."""
        self.cursor = min(len(self.entries), self.cursor + 1)
        if self.cursor == len(self.entries):
            return ""
        return self.entries[self.cursor]

    def reset_cursor(self) -> None:
        self.cursor = len(self.entries)

    def tail(self, count: Optional[int] = None) -> List[str]:
        if count is None:
            return list(self.entries)
        if count <= 0:
            return []
        return self.entries[-count:]

    def __len__(self) -> int:
        return len(self.entries)
