"""Expansion of ``$NAME`` and ``$?`` in a line, respecting quotes."""

from __future__ import annotations

import string
from typing import Protocol

_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")


class _Lookup(Protocol):
    def get(self, name: str, /) -> str | None: ...


def _read_variable(text: str, pos: int, env: _Lookup, last_status: int) -> tuple[str, int]:
    """Expand the variable whose ``$`` sits at ``pos``; return value and next position."""
    pos += 1
    if pos < len(text) and text[pos] == "?":
        return str(last_status), pos + 1
    if pos >= len(text) or text[pos] not in _NAME_CHARS:
        return "$", pos
    end = pos
    while end < len(text) and text[end] in _NAME_CHARS:
        end += 1
    value = env.get(text[pos:end])
    return (value if value is not None else ""), end


def expand_variables(text: str, env: _Lookup, last_status: int = 0) -> str:
    """Replace variables outside single quotes; quotes themselves are kept.

    A ``$`` outside any quotes that is directly followed by a quote is dropped.
    """
    out: list[str] = []
    in_double = False
    in_single = False
    pos = 0
    length = len(text)
    while pos < length:
        char = text[pos]
        if (
            char == "$"
            and not in_single
            and not in_double
            and pos + 1 < length
            and text[pos + 1] in "\"'"
        ):
            pos += 1
            char = text[pos]
        if char == "$" and not in_single:
            value, pos = _read_variable(text, pos, env, last_status)
            out.append(value)
            continue
        if char == '"' and not in_single:
            in_double = not in_double
        elif char == "'" and not in_double:
            in_single = not in_single
        out.append(char)
        pos += 1
    return "".join(out)