"""Session-wide interpreter context: the environment store and shell session."""

from __future__ import annotations

import os
import re
from typing import Dict, Iterator, Mapping, Optional

from history import HistoryStore

VAR_NAME_RX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EnvironmentStore:
    """Mapping of variable name to value, seeded from the OS environment."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._vars: Dict[str, str] = dict(os.environ if initial is None else initial)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._vars.get(name, default)

    def set(self, name: str, value: str) -> None:
        if not name:
            raise ValueError("variable name must not be empty")
        self._vars[name] = value

    def export(self, name: str, value: str) -> None:
        # Visible to this process (os.environ) as well as to spawned children.
        self.set(name, value)
        os.environ[name] = value

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current variables, used as a child's environment."""
        return dict(self._vars)

    def __getitem__(self, name: str) -> str:
        return self._vars[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)


class ShellSession:
    """Holds session-wide shell context: environment, history and last status."""

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        history: Optional[HistoryStore] = None,
        subst_shell: Optional[str] = None,
    ) -> None:
        self.env: EnvironmentStore = EnvironmentStore(env)
        # In-memory history unless the caller wires a persisted one.
        self.history: HistoryStore = history if history is not None else HistoryStore(None)
        self.subst_shell: str = subst_shell or os.environ.get("PYROSH_SHELL", "/bin/sh")
        self.last_status: int = 0

    def get_env(self) -> Dict[str, str]:
        return self.env.snapshot()

    def get_var(self, name: str) -> Optional[str]:
        return self.env.get(name)

    def set_var(self, name: str, value: str) -> None:
        self.env.set(name, value)

    def set_status(self, status: Optional[int]) -> None:
        self.last_status = int(status) if status is not None else 0
