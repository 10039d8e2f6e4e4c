# module for external program execution

from __future__ import annotations

import errno
import subprocess
import sys
from typing import List, Optional

from session import ShellSession


class ProcessRunner:
    """Spawn an external program in the foreground and wait for it.

    The program name is resolved against the PATH of the environment handed
    to the child, so ``export PATH=...`` takes effect on the next command.
    Standard streams are inherited from the interpreter.
    """

    def __init__(self, session: ShellSession) -> None:
        self.session = session
        self.exit_code: Optional[int] = None

    def run(self, argv: List[str]) -> int:
        if not argv:
            return 0
        name = argv[0]
        try:
            proc = subprocess.Popen(argv, env=self.session.get_env())
        except FileNotFoundError:
            return self._fail(f"{name}: command not found", 127)
        except PermissionError:
            return self._fail(f"{name}: permission denied", 126)
        except OSError as e:
            # Covers process creation failures (EAGAIN, ENOMEM, ...) and
            # exec errors such as ENOEXEC.
            status = 126 if e.errno == errno.ENOEXEC else 1
            return self._fail(f"{name}: cannot execute: {e.strerror or e}", status)

        try:
            rc = proc.wait()
            # Killed by signal N -> 128 + N, as POSIX shells report it.
            self.exit_code = 128 - rc if rc < 0 else rc
        except KeyboardInterrupt:
            # The child got the SIGINT too; collect it before re-prompting.
            proc.wait()
            self.exit_code = 130
        return self.exit_code

    def _fail(self, message: str, status: int) -> int:
        sys.stderr.write(f"pyrosh: {message}\n")
        sys.stderr.flush()
        self.exit_code = status
        return status
