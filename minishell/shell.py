"""The interactive loop: read a line, tokenize, check and run it."""

from __future__ import annotations

import os
import signal
from collections.abc import Callable, Iterable, Mapping
from typing import Optional, TextIO

from .builtins import ShellState, run_builtin
from .commands import command_words
from .environment import init_environment
from .errors import RESET, TEAL, ErrorKind, ShellError, ShellExit, report_error
from .execution import execute_pipeline
from .lexer import tokenize
from .validation import check_syntax, runs_in_shell

PROMPT = f"{TEAL}MINISHELL❯ {RESET}"
INTERRUPTED_STATUS = 130

Readline = Callable[[str], Optional[str]]


def _prompt_input(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


class Shell:
    """One shell session with its own environment and last status."""

    def __init__(
        self,
        environ: Mapping[str, str] | Iterable[str] | None = None,
        readline: Readline | None = None,
        err: TextIO | None = None,
    ) -> None:
        self.state = ShellState(env=init_environment(environ))
        self.readline = readline if readline is not None else _prompt_input
        self.err = err

    @property
    def status(self) -> int:
        return self.state.last_status

    def run_line(self, line: str) -> int:
        """Run one command line and return the status it leaves.

        Raises ShellExit when the line asks the shell to leave.
        """
        if not line:
            return self.state.last_status
        tokens = tokenize(line, self.state.env, self.state.last_status)
        if tokens.quote_error:
            self.state.last_status = report_error(ErrorKind.INVALID_INPUT, None, self.err)
            return self.state.last_status
        if not tokens.tokens:
            return self.state.last_status
        try:
            check_syntax(tokens)
        except ShellError as exc:
            self.state.last_status = exc.report(self.err)
            return self.state.last_status
        if runs_in_shell(tokens):
            return run_builtin(self.state, command_words(tokens), None, self.err)
        return execute_pipeline(self.state, tokens, self.readline, self.err)

    def _interrupted(self) -> None:
        if self.err is not None:
            self.err.write("\n")
        else:
            print(flush=True)
        self.state.last_status = INTERRUPTED_STATUS

    def loop(self) -> int:
        """Read and run lines until end of input or ``exit``; return the status."""
        while True:
            try:
                line = self.readline(PROMPT)
            except KeyboardInterrupt:
                self._interrupted()
                continue
            if line is None:
                break
            try:
                self.run_line(line)
            except ShellExit as exc:
                return exc.status
            except KeyboardInterrupt:
                self._interrupted()
        return self.state.last_status


def main(argv: list[str] | None = None) -> int:
    """Start an interactive session on the process environment."""
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    try:
        import readline as _line_editing  # noqa: F401  (enables history for input())
    except ImportError:
        pass
    return Shell(os.environ).loop()