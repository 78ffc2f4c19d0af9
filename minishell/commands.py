"""Splitting a pipeline into commands, their words, redirections and paths."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterable
from contextlib import suppress
from dataclasses import dataclass
from typing import Protocol

from .errors import ErrorKind, ShellError
from .lexer import REDIRECTIONS, Token, TokenType


class _Lookup(Protocol):
    def get(self, name: str, /) -> str | None: ...


@dataclass
class Redirections:
    """The input and output files that one command is redirected to."""

    infile: str | None = None
    outfile: str | None = None
    append: bool = False
    from_heredoc: bool = False

    @property
    def present(self) -> bool:
        return self.infile is not None or self.outfile is not None


def split_pipeline(tokens: Iterable[Token]) -> list[list[Token]]:
    """Split tokens into the commands between pipes."""
    tokens = list(tokens)
    segments: list[list[Token]] = []
    current: list[Token] = []
    for token in tokens:
        if token.type is TokenType.PIPE:
            segments.append(current)
            current = []
        else:
            current.append(token)
    if tokens and tokens[-1].type is not TokenType.PIPE:
        segments.append(current)
    return segments


def command_words(tokens: Iterable[Token]) -> list[str]:
    """Return the command's words, leaving out redirections and their targets."""
    words: list[str] = []
    skip_next = False
    for token in tokens:
        if skip_next:
            skip_next = False
            continue
        if token.type in REDIRECTIONS:
            skip_next = True
        elif token.type is TokenType.STRING:
            words.append(token.text)
    return words


def _discard_heredoc(files: Redirections) -> None:
    if files.from_heredoc and files.infile is not None:
        with suppress(OSError):
            os.unlink(files.infile)
    files.from_heredoc = False


def collect_redirections(
    tokens: Iterable[Token],
    heredoc: Callable[[str], str | None] | None = None,
) -> Redirections:
    """Gather a command's redirections; the last input and the last output win.

    ``heredoc`` reads a here-document for a delimiter and returns the file it
    was written to, or None when it could not be made.
    """
    tokens = list(tokens)
    files = Redirections()
    position = 0
    while position < len(tokens):
        token = tokens[position]
        if token.type not in REDIRECTIONS:
            position += 1
            continue
        if position + 1 >= len(tokens):
            raise ShellError(ErrorKind.INVALID_INPUT, token.text)
        target = tokens[position + 1].text
        if token.type in (TokenType.REDIR_OUT, TokenType.APPEND):
            files.outfile = target
            files.append = token.type is TokenType.APPEND
        elif token.type is TokenType.REDIR_IN:
            _discard_heredoc(files)
            files.infile = target
        else:
            _discard_heredoc(files)
            path = heredoc(target) if heredoc is not None else None
            if path is None:
                files.infile = None
                raise ShellError(ErrorKind.INVALID_INPUT, target)
            files.infile = path
            files.from_heredoc = True
        position += 2
    return files


def resolve_command_path(env: _Lookup, command: str) -> str | None:
    """Find the file a command names, directly or through PATH.

    Raises ShellError when the command needs PATH and PATH is not set.
    """
    if "/" in command:
        try:
            info = os.stat(command)
        except OSError:
            return None
        if not stat.S_ISREG(info.st_mode):
            return None
        return command
    search = env.get("PATH")
    if search is None:
        raise ShellError(ErrorKind.ENV_NOT_FOUND, "PATH")
    for directory in filter(None, search.split(":")):
        candidate = f"{directory}/{command}"
        if os.access(candidate, os.F_OK):
            return candidate
    return None