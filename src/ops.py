from __future__ import annotations

import subprocess
import sys
from typing import List, Optional

from command import dispatch
from groups import CommandGroup, apply_assignments, split_line
from session import ShellSession


# ---- Preprocessing: tilde, command substitution, variables ----

def expand_tilde(line: str, session: ShellSession) -> str:
    """Replace a leading ``~`` segment with $HOME.

    The segment runs up to the first ``/`` of the line, which is kept. With no
    ``/`` anywhere, the whole line collapses to $HOME. Lines not starting with
    ``~`` and sessions without HOME are left alone.
    """
    if not line.startswith("~"):
        return line
    home = session.get_var("HOME")
    if home is None:
        return line
    slash = line.find("/")
    if slash == -1:
        return home
    return home + line[slash:]


def _find_closing_paren(line: str, start: int) -> int:
    depth = 1
    j = start
    while j < len(line):
        c = line[j]
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
            if depth == 0:
                return j
        j += 1
    return -1


def run_substitution(command: str, session: ShellSession) -> Optional[str]:
    """Run command through the helper shell and return its stdout.

    At most one trailing newline is removed. Returns None when the helper
    process cannot be started.
    """
    try:
        completed = subprocess.run(
            [session.subst_shell, "-c", command],
            stdout=subprocess.PIPE,
            text=True,
            errors="replace",
            env=session.get_env(),
        )
    except OSError as e:
        sys.stderr.write(f"pyrosh: command substitution failed: $({command}): {e.strerror or e}\n")
        sys.stderr.flush()
        return None
    output = completed.stdout
    if output.endswith("\n"):
        output = output[:-1]
    return output


def expand_command_substitutions(line: str, session: ShellSession) -> str:
    """Replace every ``$(...)`` span with the output of the enclosed command.

    Spans are matched with parenthesis nesting, so ``$(echo $(echo hi))`` runs
    the whole inner text in one helper shell. Scanning resumes after the
    inserted text, so output containing ``$(`` is kept literally and never
    run. A span whose command cannot start is kept verbatim; an unterminated
    ``$(`` is left as typed. Output that is not valid UTF-8 is decoded with
    replacement characters.
    """
    out: List[str] = []
    i = 0
    n = len(line)
    while i < n:
        if line[i] == '$' and i + 1 < n and line[i + 1] == '(':
            j = _find_closing_paren(line, i + 2)
            if j < 0:
                out.append(line[i:])
                break
            subst = run_substitution(line[i + 2:j], session)
            out.append(line[i:j + 1] if subst is None else subst)
            i = j + 1
            continue
        out.append(line[i])
        i += 1
    return ''.join(out)


def _is_name_char(ch: str) -> bool:
    return ch == '_' or ('0' <= ch <= '9') or ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')


def expand_variables(line: str, session: ShellSession) -> str:
    """Expand $NAME and ${NAME} from the session environment.

    Unknown names are left verbatim; scanning continues right after the
    reference, so a value is never expanded a second time.
    """
    out: List[str] = []
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch != '$':
            out.append(ch)
            i += 1
            continue
        if i + 1 < n and line[i + 1] == '{':
            # ${NAME}
            j = i + 2
            while j < n and _is_name_char(line[j]):
                j += 1
            if j < n and line[j] == '}' and j > i + 2:
                val = session.get_var(line[i + 2:j])
                out.append(line[i:j + 1] if val is None else val)
                i = j + 1
            else:
                out.append('$')
                i += 1
            continue
        # $NAME
        j = i + 1
        while j < n and _is_name_char(line[j]):
            j += 1
        if j == i + 1:
            out.append('$')
            i += 1
            continue
        val = session.get_var(line[i + 1:j])
        out.append(line[i:j] if val is None else val)
        i = j
    return ''.join(out)


def expand_line(line: str, session: ShellSession) -> str:
    """Apply tilde, command and variable expansion, in that order."""
    s = expand_tilde(line, session)
    s = expand_command_substitutions(s, session)
    return expand_variables(s, session)


# ---- Execution ----

def _should_run(prev_op: Optional[str], status: int) -> bool:
    if prev_op == "&&":
        return status == 0
    if prev_op == "||":
        return status != 0
    return True


def exec_commands(commands: List[CommandGroup], session: ShellSession) -> int:
    """Run linked commands with short-circuit ``&&`` / ``||`` evaluation."""
    status = session.last_status
    prev_op: Optional[str] = None
    for cmd in commands:
        if _should_run(prev_op, status):
            argv = apply_assignments(cmd, session)
            status = dispatch(argv, session) if argv else 0
            session.set_status(status)
        prev_op = cmd.next_op
    return status


def execute_line(line: str, session: ShellSession) -> int:
    """Preprocess, tokenize and run one input line; return the last status."""
    commands = split_line(expand_line(line, session))
    if not commands:
        return 0
    return exec_commands(commands, session)
