"""Syntax checks on a tokenized line and the builtin dispatch decision."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import ErrorKind, ShellError
from .lexer import REDIRECTIONS, Token, TokenType

BUILTINS = frozenset({"exit", "cd", "echo", "pwd", "env", "export", "unset"})

_ROUTING = frozenset(
    {TokenType.PIPE, TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.APPEND}
)


def is_builtin(name: str) -> bool:
    """Tell whether ``name`` is one of the shell's own commands."""
    return name in BUILTINS


def _syntax_error(context: str) -> ShellError:
    return ShellError(ErrorKind.SYNTAX_ERROR, context)


def check_syntax(tokens: Iterable[Token]) -> None:
    """Raise ShellError for misplaced pipes and redirections without a target."""
    tokens = list(tokens)
    if not tokens:
        return
    if tokens[0].type is TokenType.PIPE:
        raise _syntax_error("|")
    last = len(tokens) - 1
    for position, token in enumerate(tokens):
        if token.type is TokenType.PIPE:
            if position == last:
                raise _syntax_error("|")
            if tokens[position + 1].type is TokenType.PIPE:
                raise _syntax_error("||")
        elif token.type in REDIRECTIONS:
            if position == last:
                raise _syntax_error("newline")
            following = tokens[position + 1]
            if following.type is TokenType.PIPE or following.type in REDIRECTIONS:
                raise _syntax_error(following.text)


def runs_in_shell(tokens: Iterable[Token]) -> bool:
    """Tell whether the line names a builtin and has no pipe or file redirection."""
    tokens = list(tokens)
    if not any(is_builtin(token.text) for token in tokens):
        return False
    return not any(token.type in _ROUTING for token in tokens)