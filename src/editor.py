"""Interactive line input: raw-mode editor, readline editor and a plain fallback."""

from __future__ import annotations

import codecs
import os
import sys
import termios
from contextlib import nullcontext
from typing import Callable, List, Optional

try:
    import readline  # type: ignore
except Exception:  # pragma: no cover - fallback when readline unavailable
    readline = None

from completer import CompletionEngine, Completions
from session import ShellSession

ENTER_KEYS = ("\r", "\n")
BACKSPACE_KEYS = ("\x7f", "\x08")
CTRL_C = "\x03"
CTRL_D = "\x04"
ESC = "\x1b"
TAB = "\t"
BELL = "\a"
ERASE_LINE = "\033[K"


class RawTerminal:
    """Scoped raw mode for a terminal file descriptor.

    Line buffering and echo are switched off on entry; signal keys stay
    enabled so Ctrl-C still interrupts. The settings captured on entry are
    restored on every exit, including exceptions.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved: Optional[List] = None

    def __enter__(self) -> "RawTerminal":
        self._saved = termios.tcgetattr(self.fd)
        new = termios.tcgetattr(self.fd)
        new[3] = new[3] & ~(termios.ICANON | termios.ECHO)
        new[6][termios.VMIN] = 1
        new[6][termios.VTIME] = 0
        termios.tcsetattr(self.fd, termios.TCSADRAIN, new)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None


class KeyReader:
    """Read one decoded character at a time from a file descriptor."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def read_char(self) -> str:
        # Returns '' at end of input.
        while True:
            data = os.read(self.fd, 1)
            if not data:
                return ""
            ch = self._decoder.decode(data)
            if ch:
                return ch


def _stdout_write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


class LineEditor:
    """Hand-rolled raw-mode line editor.

    Handles Enter, Backspace, Up/Down history recall and Tab completion.
    Characters come from ``read_char`` (returning '' at end of input) and all
    echo goes through ``write``, so the editor can be driven without a TTY.
    """

    def __init__(
        self,
        session: ShellSession,
        completer: CompletionEngine,
        read_char: Callable[[], str],
        write: Callable[[str], None] = _stdout_write,
        terminal: Optional[RawTerminal] = None,
    ) -> None:
        self.session = session
        self.history = session.history
        self.completer = completer
        self.read_char = read_char
        self.write = write
        self.terminal = terminal

    def read_line(self, prompt: str) -> str:
        with (self.terminal if self.terminal is not None else nullcontext()):
            return self._read(prompt)

    def _redraw(self, prompt: str, buf: str) -> str:
        self.write("\r" + ERASE_LINE + prompt + buf)
        return buf

    def _read_escape(self) -> str:
        # ESC [ A / ESC O A style sequences; returns the final letter or ''.
        if self.read_char() not in ("[", "O"):
            return ""
        final = self.read_char()
        while final.isdigit() or final == ";":
            final = self.read_char()
        return final if final != "~" else ""

    def _read(self, prompt: str) -> str:
        self.history.reset_cursor()
        buf = ""
        completion: Optional[Completions] = None
        comp_index = 0
        comp_start = 0
        self.write(prompt)

        while True:
            ch = self.read_char()
            if ch != TAB:
                completion = None

            if ch == "":
                raise EOFError
            if ch in ENTER_KEYS:
                self.write("\n")
                self.history.append(buf)
                return buf
            if ch == CTRL_D:
                if not buf:
                    raise EOFError
                continue
            if ch == CTRL_C:
                # The read loop moves to a fresh line.
                raise KeyboardInterrupt
            if ch in BACKSPACE_KEYS:
                if buf:
                    buf = buf[:-1]
                    self.write("\b \b")
                continue
            if ch == ESC:
                key = self._read_escape()
                if key == "A":
                    entry = self.history.previous()
                    if entry is not None:
                        buf = self._redraw(prompt, entry)
                elif key == "B":
                    if self.history.cursor < len(self.history):
                        buf = self._redraw(prompt, self.history.next())
                continue
            if ch == TAB:
                if completion is None:
                    comp_start = buf.rfind(" ") + 1
                    completion = self.completer.candidates(buf[comp_start:])
                    comp_index = 0
                    if not completion:
                        completion = None
                        self.write(BELL)
                        continue
                else:
                    comp_index += 1
                candidate = completion.get(comp_index)
                if candidate is None:
                    # Past the last candidate: show the typed prefix again.
                    candidate = completion.prefix
                    comp_index = -1
                buf = self._redraw(prompt, buf[:comp_start] + candidate)
                continue
            if ch.isprintable():
                buf += ch
                self.write(ch)


class ReadlineEditor:
    """Line input through GNU readline / libedit."""

    def __init__(self, session: ShellSession, completer: CompletionEngine) -> None:
        self.history = session.history
        readline.set_completer(completer.complete)
        if 'libedit' in (readline.__doc__ or ''):
            readline.parse_and_bind("bind ^I rl_complete")
        else:
            readline.parse_and_bind("tab: complete")
        readline.parse_and_bind("Control-l: clear-screen")
        readline.set_completer_delims(' \t\n')
        readline.set_auto_history(False)
        readline.clear_history()
        for entry in self.history.entries:
            readline.add_history(entry)

    def read_line(self, prompt: str) -> str:
        line = input(prompt)
        if line.strip():
            self.history.append(line)
            readline.add_history(line)
        return line


class PlainEditor:
    """Cooked-mode input for non-terminal stdin (pipes, files)."""

    def __init__(self, session: ShellSession) -> None:
        self.history = session.history

    def read_line(self, prompt: str) -> str:
        _stdout_write(prompt)
        line = sys.stdin.readline()
        if not line:
            raise EOFError
        line = line.rstrip("\n")
        self.history.append(line)
        return line


def make_editor(session: ShellSession, completer: CompletionEngine, kind: Optional[str] = None):
    """Pick the input strategy from PYROSH_EDITOR (``raw`` or ``readline``)."""
    kind = kind or os.environ.get("PYROSH_EDITOR", "raw")
    if not sys.stdin.isatty():
        return PlainEditor(session)
    if kind == "readline":
        if readline is not None:
            return ReadlineEditor(session, completer)
        sys.stderr.write("pyrosh: readline unavailable, using raw editor\n")
        sys.stderr.flush()
    elif kind != "raw":
        sys.stderr.write(f"pyrosh: unknown PYROSH_EDITOR '{kind}', using raw editor\n")
        sys.stderr.flush()
    fd = sys.stdin.fileno()
    return LineEditor(session, completer, KeyReader(fd).read_char, terminal=RawTerminal(fd))
