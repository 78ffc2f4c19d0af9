"""The shell's own copy of the environment, kept as ordered NAME=value entries."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Mapping

_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?)([0-9]*)")


def _atoi(text: str) -> int:
    """Read a leading integer the way the C library does, 0 if there is none."""
    match = _ATOI.match(text)
    if match is None or not match.group(2):
        return 0
    value = int(match.group(2))
    return -value if match.group(1) == "-" else value


def parse_assignment(text: str) -> tuple[str, str]:
    """Split ``NAME=value`` into its name and value; a missing value is empty."""
    name, _, value = text.partition("=")
    return name, value


class Environment:
    """Ordered environment entries with shell-style lookup and update."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._position(name) is not None

    def __repr__(self) -> str:
        return f"Environment({self._entries!r})"

    def _position(self, name: str) -> int | None:
        prefix = name + "="
        for position, entry in enumerate(self._entries):
            if entry.startswith(prefix):
                return position
        return None

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None when it is not set."""
        position = self._position(name)
        if position is None:
            return None
        return self._entries[position][len(name) + 1 :]

    def index(self, name: str) -> int:
        """Return the position of ``name``; raise KeyError when it is not set."""
        position = self._position(name)
        if position is None:
            raise KeyError(name)
        return position

    def set(self, name: str, value: str) -> None:
        """Replace the entry for ``name`` in place, or append a new one."""
        line = f"{name}={value}"
        position = self._position(name)
        if position is None:
            self._entries.append(line)
        else:
            self._entries[position] = line

    def unset(self, name: str) -> bool:
        """Remove every entry for ``name``; return whether anything was removed."""
        prefix = name + "="
        kept = [entry for entry in self._entries if not entry.startswith(prefix)]
        removed = len(kept) != len(self._entries)
        self._entries = kept
        return removed

    def as_dict(self) -> dict[str, str]:
        """Return the entries that carry a value as a mapping, first entry winning."""
        result: dict[str, str] = {}
        for entry in self._entries:
            name, sep, value = entry.partition("=")
            if sep:
                result.setdefault(name, value)
        return result

    def visible_lines(self) -> list[str]:
        """Return the entries that ``env`` prints: those with a non-empty value."""
        return [
            entry
            for entry in self._entries
            if entry.partition("=")[1] and entry.partition("=")[2]
        ]

    def sorted_export_lines(self) -> list[str]:
        """Sort the entries in place and return them as ``export`` prints them."""
        self._entries.sort(key=lambda entry: entry.encode("utf-8", "surrogateescape"))
        lines = []
        for entry in self._entries:
            name, sep, value = entry.partition("=")
            lines.append(f'{name}="{value}"' if sep and value else name)
        return lines


def init_environment(
    environ: Mapping[str, str] | Iterable[str] | None = None,
) -> Environment:
    """Copy the process environment and raise SHLVL by one."""
    if environ is None:
        environ = os.environ
    if isinstance(environ, Mapping):
        entries = [f"{name}={value}" for name, value in environ.items()]
    else:
        entries = list(environ)
    env = Environment(entries)
    level = _atoi(env.get("SHLVL") or "") + 1
    env.set("SHLVL", str(level))
    return env