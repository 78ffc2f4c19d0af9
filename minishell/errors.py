"""Error kinds, their messages and exit statuses, and the shell's exceptions."""

from __future__ import annotations

import sys
from enum import Enum, auto
from typing import TextIO

TEAL = "\001\033[0;36m\002"
RED = "\001\033[0;31m\002"
RESET = "\001\033[0m\002"

PROGRAM_NAME = "minishell"


class ErrorKind(Enum):
    """Every kind of error the shell reports."""

    ENV_NOT_FOUND = auto()
    FILE_NOT_FOUND = auto()
    COMMAND_NOT_FOUND = auto()
    INVALID_INPUT = auto()
    INVALID_FILE = auto()
    PIPE_ERROR = auto()
    FORK_ERROR = auto()
    EXEC_ERROR = auto()
    MEMORY_ERROR = auto()
    PERMISSION_ERROR = auto()
    SYNTAX_ERROR = auto()


_MESSAGES = {
    ErrorKind.ENV_NOT_FOUND: "Environment variable not found",
    ErrorKind.FILE_NOT_FOUND: "No such file or directory",
    ErrorKind.COMMAND_NOT_FOUND: "Command not found",
    ErrorKind.INVALID_INPUT: "Invalid input",
    ErrorKind.INVALID_FILE: "No such file or directory",
    ErrorKind.PIPE_ERROR: "Pipe failure",
    ErrorKind.FORK_ERROR: "Fork failure",
    ErrorKind.EXEC_ERROR: "Failed to execute command",
    ErrorKind.MEMORY_ERROR: "Memory allocation failed",
    ErrorKind.PERMISSION_ERROR: "Permission denied",
    ErrorKind.SYNTAX_ERROR: "Parse error",
}

_STATUSES = {
    ErrorKind.ENV_NOT_FOUND: 1,
    ErrorKind.FILE_NOT_FOUND: 1,
    ErrorKind.COMMAND_NOT_FOUND: 127,
    ErrorKind.INVALID_INPUT: 1,
    ErrorKind.INVALID_FILE: 1,
    ErrorKind.PIPE_ERROR: 1,
    ErrorKind.FORK_ERROR: 1,
    ErrorKind.EXEC_ERROR: 126,
    ErrorKind.MEMORY_ERROR: 1,
    ErrorKind.PERMISSION_ERROR: 126,
    ErrorKind.SYNTAX_ERROR: 2,
}


def error_message(kind: ErrorKind) -> str:
    """Return the plain message for an error kind."""
    return _MESSAGES[kind]


def error_status(kind: ErrorKind) -> int:
    """Return the exit status that an error kind sets."""
    return _STATUSES[kind]


def format_error(kind: ErrorKind, context: str | None = None) -> str:
    """Build the coloured error line, without its trailing newline."""
    prefix = f"{PROGRAM_NAME}: "
    if context:
        prefix += f"{context}: "
    return f"{prefix}{RED}{error_message(kind)}{RESET}"


def report_error(
    kind: ErrorKind, context: str | None = None, stream: TextIO | None = None
) -> int:
    """Write the error line to ``stream`` (stderr by default) and return its status."""
    target = stream if stream is not None else sys.stderr
    target.write(format_error(kind, context) + "\n")
    target.flush()
    return error_status(kind)


class ShellError(Exception):
    """An error that the shell reports and then carries on from."""

    def __init__(self, kind: ErrorKind, context: str | None = None) -> None:
        self.kind = kind
        self.context = context
        message = error_message(kind)
        super().__init__(f"{context}: {message}" if context else message)

    @property
    def status(self) -> int:
        return error_status(self.kind)

    def report(self, stream: TextIO | None = None) -> int:
        """Write this error to ``stream`` and return its status."""
        return report_error(self.kind, self.context, stream)


class ShellExit(Exception):
    """Raised to leave the shell with a given exit status."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"exit {status}")