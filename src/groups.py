"""Grouping and tokenization utilities for pyrosh.

This module defines the data structures representing a tokenized input line
(commands and the control operators between them) and the helpers that turn a
preprocessed line into a sequence of these groups.

There is no quoting: whitespace runs are the only delimiter. Leading
``NAME=VALUE`` tokens of a command are environment assignments; they are
split off the argv here and applied to the session when the command is
reached. ``&&`` and ``||`` separate commands; ``|`` truncates the rest of
the line (no pipelines are built).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from session import VAR_NAME_RX, ShellSession

# Operators that end collection for the current command
OPERATORS = {"&&", "||", "|"}

@dataclass
class CommandGroup:
    """A simple command with its argv tokens (argv[0] is the program).

    ``next_op`` is the operator joining this command to the following one
    (``&&``, ``||``, or None for the last command of the line).
    """
    parts: list[str]
    assignments: list[tuple[str, str]] = field(default_factory=list)
    next_op: str | None = None

@dataclass
class OperatorGroup:
    """A control operator separating commands (``&&``, ``||`` or ``|``)."""
    op: str

# Either kind of group produced by group_tokens
Group = CommandGroup | OperatorGroup

# --- Tokenization ---

def tokenize(line: str) -> list[str]:
    """Split a preprocessed line on whitespace runs."""
    return line.split()

def is_assignment_token(tok: str) -> bool:
    """Return True if tok looks like NAME=value with a valid NAME."""
    if "=" not in tok or tok.startswith("="):
        return False
    name, _ = tok.split("=", 1)
    return bool(VAR_NAME_RX.match(name))

# --- Grouping ---

def _make_command(tokens: list[str]) -> CommandGroup:
    idx = 0
    assignments: list[tuple[str, str]] = []
    while idx < len(tokens) and is_assignment_token(tokens[idx]):
        name, value = tokens[idx].split("=", 1)
        assignments.append((name, value))
        idx += 1
    return CommandGroup(parts=tokens[idx:], assignments=assignments)

def group_tokens(tokens: list[str]) -> list[Group]:
    """Group tokens into commands and operators, truncating at the first ``|``."""
    groups: list[Group] = []
    buf: list[str] = []

    def flush() -> None:
        nonlocal buf
        if buf:
            groups.append(_make_command(buf))
            buf = []

    for tok in tokens:
        if tok in OPERATORS:
            flush()
            if tok == "|":
                return groups
            groups.append(OperatorGroup(tok))
        else:
            buf.append(tok)
    flush()
    return groups

def link_commands(groups: Iterable[Group]) -> list[CommandGroup]:
    """Attach each operator to the command on its left.

    An operator with no command on its left (``&& ls``) is dropped. When two
    operators follow each other, the first one wins.
    """
    commands: list[CommandGroup] = []
    for g in groups:
        if isinstance(g, OperatorGroup):
            if commands and commands[-1].next_op is None:
                commands[-1].next_op = g.op
        else:
            commands.append(g)
    return commands

# --- Public helpers ---

def split_line(line: str) -> list[CommandGroup]:
    return link_commands(group_tokens(tokenize(line)))

def apply_assignments(cmd: CommandGroup, session: ShellSession) -> list[str]:
    """Store the command's assignments in the session and return its argv."""
    for name, value in cmd.assignments:
        session.set_var(name, value)
    return list(cmd.parts)
