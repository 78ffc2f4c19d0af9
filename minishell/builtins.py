"""The shell's own commands: echo, cd, pwd, env, export, unset and exit."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TextIO

from .environment import Environment, parse_assignment
from .errors import ErrorKind, ShellExit, report_error

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_EXIT_ARG = re.compile(r"[ \t]*([+-]*)([0-9]*)")
_PWD_TRIM = "\"'"


@dataclass
class ShellState:
    """What the shell carries from one command to the next."""

    env: Environment = field(default_factory=Environment)
    last_status: int = 0


def _out(stream: TextIO | None) -> TextIO:
    return stream if stream is not None else sys.stdout


def _fail(
    state: ShellState, kind: ErrorKind, context: str | None, err: TextIO | None
) -> int:
    state.last_status = report_error(kind, context, err)
    return state.last_status


def _valid_name(name: str) -> bool:
    return _IDENTIFIER.fullmatch(name) is not None


def exit_code(arg: str) -> int:
    """Turn the argument of ``exit`` into the status the process ends with.

    More than one sign, trailing garbage or an empty argument give 255.
    """
    if arg == "":
        return 255
    match = _EXIT_ARG.match(arg)
    signs, digits = match.group(1), match.group(2)
    if len(signs) > 1 or match.end() != len(arg):
        return 255
    value = int(digits) if digits else 0
    if "-" in signs:
        value = -value
    return value % 256


def builtin_echo(
    state: ShellState, args: Sequence[str], out: TextIO | None = None
) -> int:
    """Print the arguments; any leading ``-n``, ``-nn``... suppresses the newline."""
    stream = _out(out)
    words = list(args)
    no_newline = False
    while words and words[0].startswith("-n") and set(words[0][1:]) == {"n"}:
        no_newline = True
        words.pop(0)
    stream.write(" ".join(words))
    if not no_newline:
        stream.write("\n")
    stream.flush()
    state.last_status = 0
    return 0


def builtin_cd(
    state: ShellState, args: Sequence[str], err: TextIO | None = None
) -> int:
    """Change directory to the argument, HOME (none or ``~``) or OLDPWD (``-``)."""
    target = args[0] if args else "~"
    if target == "~":
        path = state.env.get("HOME")
    elif target == "-":
        path = state.env.get("OLDPWD")
    else:
        path = target
    if path is None or not os.access(path, os.F_OK):
        return _fail(state, ErrorKind.INVALID_FILE, path, err)
    if not os.access(path, os.X_OK):
        return _fail(state, ErrorKind.PERMISSION_ERROR, path, err)
    try:
        os.chdir(path)
    except OSError:
        return _fail(state, ErrorKind.EXEC_ERROR, path, err)
    try:
        cwd = os.getcwd()
    except OSError:
        return state.last_status
    previous = state.env.get("PWD") or ""
    state.env.set("OLDPWD", previous.strip(_PWD_TRIM))
    state.env.set("PWD", cwd.strip(_PWD_TRIM))
    state.last_status = 0
    return 0


def builtin_pwd(state: ShellState, out: TextIO | None = None) -> int:
    """Print the current working directory."""
    stream = _out(out)
    try:
        stream.write(os.getcwd() + "\n")
        stream.flush()
    except OSError:
        pass
    state.last_status = 0
    return 0


def builtin_env(state: ShellState, out: TextIO | None = None) -> int:
    """Print every variable that has a non-empty value."""
    stream = _out(out)
    for line in state.env.visible_lines():
        stream.write(line + "\n")
    stream.flush()
    state.last_status = 0
    return 0


def builtin_export(
    state: ShellState,
    args: Sequence[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Set each ``NAME[=value]``; with no arguments print the sorted environment."""
    if not args:
        stream = _out(out)
        for line in state.env.sorted_export_lines():
            stream.write(line + "\n")
        stream.flush()
        return state.last_status
    for arg in args:
        name, value = parse_assignment(arg)
        if not name or not _valid_name(name):
            _fail(state, ErrorKind.INVALID_INPUT, arg, err)
            continue
        state.env.set(name, value)
    return state.last_status


def builtin_unset(
    state: ShellState, args: Sequence[str], err: TextIO | None = None
) -> int:
    """Remove each named variable; names that are not set are ignored."""
    for name in args:
        if not _valid_name(name):
            _fail(state, ErrorKind.INVALID_INPUT, name, err)
            continue
        state.env.unset(name)
    return state.last_status


def builtin_exit(state: ShellState, args: Sequence[str]) -> None:
    """Leave the shell by raising ShellExit with the chosen status."""
    status = exit_code(args[0]) if args else state.last_status % 256
    state.last_status = status
    raise ShellExit(status)


def run_builtin(
    state: ShellState,
    argv: Sequence[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run ``argv`` if it names a builtin and return the resulting status.

    A name that is not a builtin does nothing.
    """
    if not argv:
        return state.last_status
    name, args = argv[0], list(argv[1:])
    handlers: dict[str, Callable[[], object]] = {
        "exit": lambda: builtin_exit(state, args),
        "cd": lambda: builtin_cd(state, args, err),
        "echo": lambda: builtin_echo(state, args, out),
        "pwd": lambda: builtin_pwd(state, out),
        "env": lambda: builtin_env(state, out),
        "export": lambda: builtin_export(state, args, out, err),
        "unset": lambda: builtin_unset(state, args, err),
    }
    handler = handlers.get(name)
    if handler is not None:
        handler()
    return state.last_status