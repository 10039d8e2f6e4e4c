"""Tab completion over PATH executables and filesystem entries."""

from __future__ import annotations

import os
import stat
from typing import Iterator, List, Optional

from session import ShellSession


class Completions:
    """Finite, restartable candidate sequence computed once for one prefix."""

    def __init__(self, prefix: str, candidates: List[str]) -> None:
        self.prefix = prefix
        self._candidates = sorted(candidates)

    def get(self, index: int) -> Optional[str]:
        """Return the index-th candidate, or None once past the end."""
        if 0 <= index < len(self._candidates):
            return self._candidates[index]
        return None

    def __iter__(self) -> Iterator[str]:
        return iter(self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)


def _is_owner_executable(path: str) -> bool:
    try:
        st = os.stat(path)
    except OSError:
        return False
    return not stat.S_ISDIR(st.st_mode) and bool(st.st_mode & stat.S_IXUSR)


class CompletionEngine:
    def __init__(self, session: ShellSession) -> None:
        self.session = session
        # Only used by the readline-style complete(text, state) adapter.
        self._current: Optional[Completions] = None

    def candidates(self, prefix: str) -> Completions:
        found = set()
        if "/" not in prefix:
            found.update(self._scan_path(prefix))
        found.update(self._scan_filesystem(prefix))
        return Completions(prefix, list(found))

    def complete(self, text: str, state: int) -> Optional[str]:
        """readline completer protocol: return the state-th candidate for text."""
        if state == 0 or self._current is None or self._current.prefix != text:
            self._current = self.candidates(text)
        return self._current.get(state)

    def _scan_path(self, prefix: str) -> List[str]:
        matches: List[str] = []
        path_var = self.session.env.get("PATH") or ""
        for directory in path_var.split(os.pathsep):
            if not directory:
                continue
            try:
                with os.scandir(directory) as entries:
                    for entry in entries:
                        if entry.name.startswith(prefix) and _is_owner_executable(entry.path):
                            matches.append(entry.name + " ")
            except OSError:
                continue
        return matches

    def _scan_filesystem(self, prefix: str) -> List[str]:
        dirname, partial = os.path.split(prefix)
        search_dir = dirname or "."
        if search_dir == "~" or search_dir.startswith("~/"):
            home = self.session.env.get("HOME")
            if home:
                search_dir = home + search_dir[1:]
        matches: List[str] = []
        try:
            with os.scandir(search_dir) as entries:
                for entry in entries:
                    if not entry.name.startswith(partial):
                        continue
                    display = os.path.join(dirname, entry.name) if dirname else entry.name
                    try:
                        is_dir = entry.is_dir()
                    except OSError:
                        is_dir = False
                    matches.append(display + "/" if is_dir else display)
        except OSError:
            return []
        return matches
