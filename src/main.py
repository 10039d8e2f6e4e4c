#!/usr/bin/env python3

# Entry of pyrosh

from __future__ import annotations

import sys
from typing import Optional

from completer import CompletionEngine
from editor import make_editor
from history import HistoryStore, default_history_path
from ops import execute_line
from session import ShellSession

PROMPT = "PyroShell$ "
EXIT_COMMAND = "exit"


def create_session() -> ShellSession:
    """Build the session from the OS environment and the persisted history."""
    history = HistoryStore(default_history_path())
    history.load()
    return ShellSession(history=history)


def repl(session: Optional[ShellSession] = None, editor=None) -> int:
    if session is None:
        session = create_session()
    if editor is None:
        editor = make_editor(session, CompletionEngine(session))

    while True:
        try:
            line = editor.read_line(PROMPT)
        except EOFError:
            # Ctrl-D on empty line -> exit
            print()
            break
        except KeyboardInterrupt:
            # Ctrl-C at prompt -> new line and continue
            print()
            continue

        # Checked on the raw line, before any expansion.
        if line == EXIT_COMMAND:
            break
        if not line.strip():
            continue

        try:
            execute_line(line, session)
        except KeyboardInterrupt:
            print()
            session.set_status(130)
        except Exception as e:
            sys.stderr.write(f"pyrosh: error: {e}\n")
            sys.stderr.flush()
            session.set_status(1)

    # Commands' statuses are not propagated; leaving the loop is always clean.
    return 0


def main() -> None:
    sys.exit(repl())


if __name__ == "__main__":
    main()
