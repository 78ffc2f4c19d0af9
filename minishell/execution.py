"""Running a checked line: pipelines, redirections and here-documents."""

from __future__ import annotations

import io
import os
import subprocess
import sys
import tempfile
from collections.abc import Callable, Iterable, Sequence
from contextlib import ExitStack, suppress
from typing import BinaryIO, Optional, TextIO

from .builtins import ShellState, run_builtin
from .commands import (
    Redirections,
    collect_redirections,
    command_words,
    resolve_command_path,
    split_pipeline,
)
from .environment import Environment
from .errors import ErrorKind, ShellError, report_error
from .expansion import expand_variables
from .lexer import Token
from .validation import is_builtin

HEREDOC_PROMPT = "heredoc> "

Readline = Callable[[str], Optional[str]]


def read_heredoc(state: ShellState, delimiter: str, readline: Readline) -> str | None:
    """Read lines until ``delimiter`` or end of input into a temporary file.

    Variables in each line are expanded before it is compared and written.
    Returns the file's path, or None when the file could not be made.
    """
    try:
        fd, path = tempfile.mkstemp(prefix=".heredoc_")
    except OSError:
        return None
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape") as handle:
            while True:
                line = readline(HEREDOC_PROMPT)
                if line is None:
                    break
                expanded = expand_variables(line, state.env, state.last_status)
                if expanded == delimiter:
                    break
                handle.write(expanded + "\n")
    except OSError:
        with suppress(OSError):
            os.unlink(path)
        return None
    return path


def _exit_status(returncode: int) -> int:
    return 128 - returncode if returncode < 0 else returncode


def _resolve(state: ShellState, command: str, err: TextIO | None) -> str | None:
    try:
        return resolve_command_path(state.env, command)
    except ShellError as exc:
        # Reported without touching the status, as the lookup has no command yet.
        exc.report(err)
        return None


def _lone_redirection(
    state: ShellState, files: Redirections, err: TextIO | None
) -> None:
    if files.infile is not None:
        try:
            with open(files.infile, "rb"):
                pass
        except OSError:
            state.last_status = report_error(ErrorKind.INVALID_FILE, files.infile, err)
            return
    if files.outfile is not None:
        with suppress(OSError):
            open(files.outfile, "wb").close()


def _child_failed(
    state: ShellState,
    kind: ErrorKind,
    context: str,
    is_last: bool,
    err: TextIO | None,
) -> bytes | None:
    report_error(kind, context, err)
    if is_last:
        state.last_status = 1
        return None
    return b""


def _run_builtin_child(
    state: ShellState,
    words: Sequence[str],
    sink: BinaryIO | None,
    is_last: bool,
    err: TextIO | None,
) -> tuple[int, bytes]:
    """Run a builtin on a copy of the state, as a separate process would."""
    child = ShellState(env=Environment(state.env), last_status=state.last_status)
    capture = io.StringIO() if sink is not None or not is_last else None
    cwd = os.getcwd()
    try:
        if words[0] != "exit":
            run_builtin(child, words, capture, err)
    finally:
        with suppress(OSError):
            os.chdir(cwd)
    produced = b""
    if capture is not None:
        produced = capture.getvalue().encode("utf-8", "surrogateescape")
    if sink is not None:
        sink.write(produced)
    return child.last_status % 256, produced


def _run_external(
    state: ShellState,
    words: Sequence[str],
    path: str,
    stdin_data: bytes | None,
    sink: BinaryIO | None,
    is_last: bool,
    err: TextIO | None,
) -> tuple[int, bytes]:
    if sink is not None:
        stdout: object = sink
    elif not is_last:
        stdout = subprocess.PIPE
    else:
        stdout = None
    with suppress(OSError, ValueError):
        sys.stdout.flush()
    extra: dict[str, object] = {}
    if stdin_data is not None:
        extra["input"] = stdin_data
    try:
        completed = subprocess.run(
            list(words),
            executable=path,
            env=state.env.as_dict(),
            stdout=stdout,
            check=False,
            **extra,
        )
    except OSError:
        report_error(ErrorKind.EXEC_ERROR, words[0], err)
        return 126, b""
    return _exit_status(completed.returncode), completed.stdout or b""


def _launch(
    state: ShellState,
    words: Sequence[str],
    path: str | None,
    files: Redirections,
    pending: bytes | None,
    is_last: bool,
    err: TextIO | None,
) -> bytes | None:
    with ExitStack() as stack:
        stdin_data = pending
        if files.infile is not None:
            try:
                with open(files.infile, "rb") as source:
                    stdin_data = source.read()
            except OSError:
                return _child_failed(
                    state, ErrorKind.INVALID_FILE, files.infile, is_last, err
                )
        sink: BinaryIO | None = None
        if files.outfile is not None:
            try:
                sink = stack.enter_context(
                    open(files.outfile, "ab" if files.append else "wb")
                )
            except OSError:
                return _child_failed(
                    state, ErrorKind.INVALID_FILE, files.outfile, is_last, err
                )
        if is_builtin(words[0]):
            status, produced = _run_builtin_child(state, words, sink, is_last, err)
        else:
            assert path is not None
            status, produced = _run_external(
                state, words, path, stdin_data, sink, is_last, err
            )
    if is_last:
        state.last_status = status
        return None
    return produced if sink is None else b""


def _run_segment(
    state: ShellState,
    segment: list[Token],
    pending: bytes | None,
    is_last: bool,
    readline: Readline | None,
    err: TextIO | None,
) -> bytes | None:
    heredoc = None
    if readline is not None:
        heredoc = lambda delimiter: read_heredoc(state, delimiter, readline)  # noqa: E731
    try:
        files = collect_redirections(segment, heredoc)
    except ShellError as exc:
        state.last_status = exc.report(err)
        return pending
    try:
        words = command_words(segment)
        if not words:
            if files.present:
                _lone_redirection(state, files, err)
            return pending
        path = _resolve(state, words[0], err)
        builtin = is_builtin(words[0])
        if path is None and not builtin:
            state.last_status = report_error(ErrorKind.COMMAND_NOT_FOUND, words[0], err)
            return pending
        if not builtin and not os.access(path, os.X_OK):
            state.last_status = report_error(ErrorKind.PERMISSION_ERROR, words[0], err)
            return pending
        return _launch(state, words, path, files, pending, is_last, err)
    finally:
        if files.from_heredoc and files.infile is not None:
            with suppress(OSError):
                os.unlink(files.infile)


def execute_pipeline(
    state: ShellState,
    tokens: Iterable[Token],
    readline: Readline | None = None,
    err: TextIO | None = None,
) -> int:
    """Run every command of a pipeline in turn and return the final status.

    Each command's output feeds the next one; only the last command sets
    the status. Builtins run on a copy of the state, so they change nothing.
    """
    tokens = list(tokens)
    if not tokens or not tokens[0].text:
        return state.last_status
    segments = split_pipeline(tokens)
    pending: bytes | None = None
    for position, segment in enumerate(segments):
        is_last = position == len(segments) - 1
        pending = _run_segment(state, segment, pending, is_last, readline, err)
    return state.last_status