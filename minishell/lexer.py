"""Splitting a command line into typed tokens."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from .expansion import expand_variables


class _Lookup(Protocol):
    def get(self, name: str, /) -> str | None: ...


class TokenType(Enum):
    """What a token stands for on the command line."""

    STRING = auto()
    PIPE = auto()
    REDIR_IN = auto()
    REDIR_OUT = auto()
    APPEND = auto()
    HEREDOC = auto()
    SEMICOLON = auto()
    END = auto()


REDIRECTIONS = frozenset(
    {TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.APPEND, TokenType.HEREDOC}
)

_OPERATORS = {
    "|": TokenType.PIPE,
    "<": TokenType.REDIR_IN,
    ">": TokenType.REDIR_OUT,
    ">>": TokenType.APPEND,
    "<<": TokenType.HEREDOC,
}

_SPECIAL = frozenset("|<>; ")
_BLANKS = " \t"
_QUOTES = "\"'"


@dataclass(frozen=True)
class Token:
    """One token: its type and its text with quotes removed."""

    type: TokenType
    text: str

    @property
    def is_redirection(self) -> bool:
        return self.type in REDIRECTIONS


@dataclass
class Tokenized:
    """The tokens of one line, and whether the line left a quote open."""

    tokens: list[Token] = field(default_factory=list)
    quote_error: bool = False

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        return self.tokens[index]

    @property
    def texts(self) -> list[str]:
        return [token.text for token in self.tokens]


def is_special_char(c: str) -> bool:
    """Tell whether ``c`` ends an unquoted word."""
    return c in _SPECIAL


def token_type(text: str) -> TokenType:
    """Classify a token by its exact text."""
    if not text:
        return TokenType.END
    return _OPERATORS.get(text, TokenType.STRING)


def strip_quotes(text: str) -> str:
    """Remove the quote characters that open and close quoted parts."""
    out: list[str] = []
    in_double = False
    in_single = False
    for char in text:
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
        else:
            out.append(char)
    return "".join(out)


def has_unclosed_quotes(text: str) -> bool:
    """Tell whether a single or double quote is left open at the end of ``text``."""
    in_double = False
    in_single = False
    for char in text:
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
    return in_double or in_single


def extract_token(text: str, pos: int) -> tuple[str, int]:
    """Read the raw token that starts at ``pos``; return it and the position after it."""
    char = text[pos] if pos < len(text) else ""
    if is_special_char(char) and char != " ":
        pair = text[pos : pos + 2]
        if pair in (">>", "<<"):
            return pair, pos + 2
        return char, pos + 1
    quote: str | None = None
    end = pos
    while end < len(text):
        char = text[end]
        if quote is None and char in _QUOTES:
            quote = char
        elif quote is not None and char == quote:
            quote = None
        elif quote is None and (is_special_char(char) or char == "\t"):
            break
        end += 1
    return text[pos:end], end


def _raw_tokens(text: str) -> Iterator[str]:
    pos = 0
    while pos < len(text):
        while pos < len(text) and text[pos] in _BLANKS:
            pos += 1
        if pos >= len(text):
            return
        token, pos = extract_token(text, pos)
        yield token


def count_tokens(text: str) -> int:
    """Count the raw tokens in a line."""
    return sum(1 for _ in _raw_tokens(text))


def tokenize(text: str, env: _Lookup, last_status: int = 0) -> Tokenized:
    """Split, expand, classify and unquote every token of a line."""
    tokens = []
    for raw in _raw_tokens(text):
        expanded = expand_variables(raw, env, last_status)
        tokens.append(Token(token_type(expanded), strip_quotes(expanded)))
    return Tokenized(tokens, has_unclosed_quotes(text))