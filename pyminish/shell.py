"""The interactive read–expand–run loop of the shell."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Iterable, Mapping
from typing import TextIO

from pyminish.builtins import ShellExit, ShellState
from pyminish.environment import Environment
from pyminish.executor import dispatch
from pyminish.expand import expand_variables
from pyminish.syntax import is_well_formed
from pyminish.text import SEP, mark_leading_empty_quotes, replace_unquoted, trim_spaces

PROMPT = "minishell% "
INTERRUPTED_STATUS = 130
CONTINUATION_EOF_STATUS = 42
CONTINUATION_EOF_EXIT = 2
_EMPTY_WORDS = ('""', "''")


class Shell:
    """A shell session: its state, its history and its input/output streams."""

    def __init__(
        self,
        environ: Iterable[str] | Mapping[str, str] | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        entries = dict(os.environ) if environ is None else environ
        self.state = ShellState(
            env=Environment(entries),
            out=sys.stdout if stdout is None else stdout,
            stdin=sys.stdin if stdin is None else stdin,
        )
        self.history: list[str] = []

    @property
    def status(self) -> int:
        """Exit status of the last command."""
        return self.state.status

    def _interactive(self) -> bool:
        stream = self.state.stdin
        try:
            return stream is sys.stdin and stream.isatty()
        except (AttributeError, ValueError):
            return False

    def _read_line(self) -> str | None:
        if self._interactive():
            try:
                return input(PROMPT)
            except EOFError:
                return None
        self.state.console.write(PROMPT)
        self.state.console.flush()
        line = self.state.stdin.readline()
        if not line:
            return None
        return line.removesuffix("\n")

    def process_line(self, line: str) -> int:
        """Run one line of input and return the resulting status.

        Raises :class:`ShellExit` when the line ends the shell.
        """
        line = trim_spaces(line)
        if line in _EMPTY_WORDS:
            self.state.console.write("command not found: ''\n")
            return self.state.status
        if not line:
            return self.state.status
        self.history.append(line)
        if not is_well_formed(line):
            self.state.console.write("Error\n")
            return self.state.status
        expanded = expand_variables(line, self.state.env, self.state.status)
        expanded = trim_spaces(mark_leading_empty_quotes(expanded))
        expanded = trim_spaces(replace_unquoted(expanded, "|", SEP))
        dispatch(self.state, expanded)
        if self.state.status == CONTINUATION_EOF_STATUS:
            self.state.console.write("exit\n")
            raise ShellExit(CONTINUATION_EOF_EXIT)
        return self.state.status

    def run(self) -> int:
        """Read and run lines until end of input or ``exit``; return the exit code."""
        while True:
            try:
                line = self._read_line()
            except KeyboardInterrupt:
                self.state.console.write("\n")
                self.state.status = INTERRUPTED_STATUS
                continue
            if line is None:
                self.state.console.write("exit\n")
                return 0
            try:
                self.process_line(line)
            except ShellExit as exc:
                return exc.code
            except KeyboardInterrupt:
                self.state.console.write("\n")
                self.state.status = INTERRUPTED_STATUS


def main(argv: list[str] | None = None) -> int:
    """Start an interactive shell; arguments are ignored."""
    del argv
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    return Shell().run()


if __name__ == "__main__":
    raise SystemExit(main())