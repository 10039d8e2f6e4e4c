# module for command dispatch: builtins run in-process, everything else is spawned

from __future__ import annotations

import os
import sys
from typing import Callable, Dict, List

from runner import ProcessRunner
from session import VAR_NAME_RX, ShellSession

Builtin = Callable[[List[str], ShellSession], int]

builtin_commands: Dict[str, Builtin] = {}

CLEAR_SEQUENCE = "\033[H\033[2J"


def builtin(name: str):
    """Decorator to register builtins"""
    def wrapper(func: Builtin) -> Builtin:
        builtin_commands[name] = func
        return func
    return wrapper


def _error(message: str) -> None:
    sys.stderr.write(f"pyrosh: {message}\n")
    sys.stderr.flush()


@builtin("cd")
def builtin_cd(args: List[str], session: ShellSession) -> int:
    if not args:
        target = session.get_var("HOME")
        if not target:
            _error("cd: HOME not set")
            return 1
    else:
        target = args[0]

    previous = os.getcwd()
    try:
        os.chdir(target)
    except OSError as e:
        _error(f"cd: {e.strerror}: {target}")
        return 1
    session.set_var("OLDPWD", previous)
    session.set_var("PWD", os.getcwd())
    return 0


@builtin("export")
def builtin_export(args: List[str], session: ShellSession) -> int:
    """
    export NAME=value ...
    export   (prints every variable)
    """
    if not args:
        for name in sorted(session.env):
            print(f"{name}={session.env[name]}")
        return 0

    rc = 0
    for arg in args:
        name, sep, value = arg.partition("=")
        if not sep or not VAR_NAME_RX.match(name):
            _error(f"export: not a valid assignment: {arg}")
            rc = 1
            continue
        session.env.export(name, value)
    return rc


@builtin("clear")
def builtin_clear(args: List[str], session: ShellSession) -> int:
    sys.stdout.write(CLEAR_SEQUENCE)
    sys.stdout.flush()
    return 0


@builtin("history")
def builtin_history(args: List[str], session: ShellSession) -> int:
    count = None
    if args:
        try:
            count = int(args[0])
        except ValueError:
            _error(f"history: numeric argument required: {args[0]}")
            return 1
    entries = session.history.tail(count)
    first = len(session.history) - len(entries) + 1
    for number, entry in enumerate(entries, first):
        print(f"{number:5d}  {entry}")
    return 0


def dispatch(argv: List[str], session: ShellSession) -> int:
    """Run argv as a builtin or an external program and return its status."""
    if not argv:
        return 0
    func = builtin_commands.get(argv[0])
    if func is not None:
        return func(argv[1:], session) or 0
    return ProcessRunner(session).run(argv)
