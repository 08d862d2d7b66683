"""Running parsed command lines: redirections, pipelines and external programs."""

from __future__ import annotations

import io
import os
import subprocess
from collections.abc import Iterable, Iterator
from contextlib import ExitStack
from dataclasses import replace
from typing import IO, TextIO, Union

from pyminish.builtins import ShellExit, ShellState, run_builtin
from pyminish.environment import Environment
from pyminish.expand import expand_variables, remove_quotes
from pyminish.syntax import is_well_formed, pipes_start_ok, valid_pipes
from pyminish.text import (
    SEP,
    drop_blank,
    format_input,
    format_redirects,
    has_content,
    mark_leading_empty_quotes,
    remove_if_even,
    replace_unquoted,
    split_words,
)

_REDIRECTS = (">", "<", ">>", "<<")
_HEREDOC_PROMPT = "heredoc> "
_CONTINUATION_PROMPT = "> "
_EMPTY_WORD = '""'

Input = Union[str, IO, None]


def redirect_type(token: str | None) -> str | None:
    """Return the token when it is a redirection operator, else None."""
    return token if token in _REDIRECTS else None


def is_redirect(token: str | None) -> bool:
    """Return True when the token is ``>``, ``<``, ``>>`` or ``<<``."""
    return redirect_type(token) is not None


def redirect_syntax_error(tokens: list[str]) -> str | None:
    """Return the token to report when an operator lacks a target, else None."""
    for token, following in zip(tokens, [*tokens[1:], None]):
        if is_redirect(token) and (following is None or is_redirect(following)):
            return following if redirect_type(following) else token
    return None


def has_redirect(tokens: list[str]) -> bool:
    """Return True when some redirection operator is followed by another token."""
    return any(is_redirect(token) for token in tokens[:-1])


def _prompt_lines(state: ShellState, prompt: str) -> Iterator[str]:
    while True:
        state.console.write(prompt)
        state.console.flush()
        line = state.stdin.readline()
        if not line:
            return
        yield line.removesuffix("\n")


def collect_heredoc(state: ShellState, delimiter: str, lines: Iterable[str]) -> str:
    """Gather expanded lines up to *delimiter* and return them as text.

    When the lines run out first, a warning is written and what was read
    so far is returned.
    """
    collected: list[str] = []
    for raw in lines:
        line = expand_variables(raw.removesuffix("\n"), state.env, state.status)
        if line == delimiter:
            break
        collected.append(line)
    else:
        state.console.write(
            f"bash: warning: here-doc at EOF (wanted `{delimiter}')\n"
        )
    return "".join(line + "\n" for line in collected)


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_executable(state: ShellState, name: str) -> str | None:
    """Locate the program for *name*, first as a path, then along ``PATH``."""
    if not name:
        return None
    direct = os.path.join(state.cwd, name)
    if _is_executable(direct):
        return direct
    if "/" in name:
        return None
    for directory in split_words(state.env.get("PATH") or "", ":"):
        candidate = os.path.join(state.cwd, directory, name)
        if _is_executable(candidate):
            return candidate
    return None


def _fileno(stream: object) -> int | None:
    try:
        return stream.fileno()  # type: ignore[attr-defined]
    except (AttributeError, OSError, ValueError):
        return None


def _process_env(env: Environment) -> dict[str, str]:
    result: dict[str, str] = {}
    for entry in env:
        name, eq, value = entry.partition("=")
        if eq and name:
            result[name] = value
    return result


def execute_external(
    state: ShellState,
    args: list[str],
    stdin: Input = None,
    stdout: TextIO | None = None,
) -> int:
    """Run a program and return its exit status (127 when it cannot be found).

    *stdin* is text to feed, an open file, or None for the shell's input.
    """
    out = state.out if stdout is None else stdout
    path = find_executable(state, args[0]) if args else None
    if path is None:
        state.console.write(f"command not found: {args[0] if args else ''}\n")
        return 127
    data: bytes | None = None
    if isinstance(stdin, str):
        data = stdin.encode()
        stdin_arg: int | None = subprocess.PIPE
    else:
        fd = _fileno(state.stdin if stdin is None else stdin)
        stdin_arg = fd if fd is not None else subprocess.DEVNULL
    out_fd = _fileno(out)
    if out_fd is not None:
        out.flush()
    try:
        proc = subprocess.Popen(
            args,
            executable=path,
            cwd=state.cwd,
            env=_process_env(state.env),
            stdin=stdin_arg,
            stdout=out_fd if out_fd is not None else subprocess.PIPE,
        )
    except OSError:
        state.console.write(f"command not found: {args[0]}\n")
        return 127
    try:
        captured, _ = proc.communicate(input=data)
    except KeyboardInterrupt:
        proc.wait()
        return 130
    if captured:
        out.write(captured.decode(errors="replace"))
    code = proc.returncode
    return 128 - code if code < 0 else code


def _child_state(state: ShellState, out: TextIO) -> ShellState:
    return replace(state, env=Environment(list(state.env)), out=out)


def _run_redirected(state: ShellState, tokens: list[str], stdin: Input) -> int:
    pairs = list(zip(tokens, tokens[1:]))
    source: Input = stdin
    for operator, delimiter in pairs:
        if operator == "<<":
            source = collect_heredoc(
                state, delimiter, _prompt_lines(state, _HEREDOC_PROMPT)
            )
    out: TextIO = state.out
    options: list[str] = []
    with ExitStack() as stack:
        for operator, param in pairs:
            if operator not in (">", ">>", "<"):
                continue
            if param == _EMPTY_WORD:
                state.console.write("bash: : No such file or directory\n")
                return 127
            words = split_words(format_input(param, SEP), SEP)
            name = remove_if_even(remove_if_even(words[0], '"'), "'")
            path = os.path.join(state.cwd, name)
            try:
                if operator == "<":
                    source = stack.enter_context(open(path, "rb"))
                else:
                    mode = "a" if operator == ">>" else "w"
                    out = stack.enter_context(open(path, mode, encoding="utf-8"))
            except OSError:
                state.console.write(f"bash: {param}: No such file or directory\n")
                return 127
            options.extend(words[1:])
        head = tokens[0]
        if is_redirect(head) and options:
            head = " " * len(head)
        command = split_words(remove_quotes(format_input(head, SEP)), SEP)
        command += [remove_quotes(option) for option in options]
        if not command:
            return 0
        child = _child_state(state, out)
        try:
            if run_builtin(child, command):
                return 0
        except ShellExit as exc:
            return exc.code
        if is_redirect(head) and len(tokens) >= 2:
            return 0
        return execute_external(child, command, source, out)


def _run_command(state: ShellState, line: str, stdin: Input) -> int:
    formatted = format_redirects(line, SEP)
    tokens = drop_blank(split_words(formatted, SEP))
    if has_redirect(tokens):
        bad = redirect_syntax_error(tokens)
        if bad is not None:
            state.console.write(f"bash: parse error near: {bad}\n")
            return state.status
        state.status = _run_redirected(state, tokens, stdin)
        return state.status
    words = split_words(
        remove_quotes(mark_leading_empty_quotes(format_input(formatted, SEP))), SEP
    )
    if not words or run_builtin(state, words):
        return state.status
    if is_redirect(words[0]) and len(words) >= 2:
        return state.status
    state.status = execute_external(state, words, stdin)
    return state.status


def run_command(state: ShellState, line: str) -> int:
    """Run one command with its redirections and return the new status."""
    return _run_command(state, line, None)


def run_pipeline(state: ShellState, segments: list[str]) -> int:
    """Run commands joined by pipes, each one's output feeding the next.

    Every stage works on its own copy of the environment. The pipeline as
    a whole always leaves status 0.
    """
    data: Input = None
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        sink: TextIO = state.out if index == last else io.StringIO()
        child = _child_state(state, sink)
        segment = mark_leading_empty_quotes(segment)
        if segment == _EMPTY_WORD:
            state.console.write("bash: : command not found\n")
        else:
            try:
                _run_command(child, segment, data)
            except ShellExit:
                pass
        if index != last:
            data = sink.getvalue()  # type: ignore[attr-defined]
    state.status = 0
    return state.status


def _needs_more(line: str) -> bool:
    count = line.count(SEP)
    return count > 0 and count >= len(split_words(line, SEP))


def _continue_line(state: ShellState, line: str) -> str | None:
    for extra in _prompt_lines(state, _CONTINUATION_PROMPT):
        if not pipes_start_ok(extra) or not valid_pipes(extra):
            state.console.write("Error\n")
            state.status = 1
            return None
        if not has_content(extra):
            continue
        line += replace_unquoted(extra, "|", SEP)
        if not _needs_more(line):
            return line
    state.status = 42
    return None


def _pipe(state: ShellState, line: str) -> int:
    segments = drop_blank(split_words(line, SEP))
    if line.count(SEP) > 0 and line.count(SEP) >= len(segments):
        continued = _continue_line(state, line)
        if continued is None:
            return state.status
        if not is_well_formed(continued):
            state.console.write("Error\n")
            state.status = 1
            return state.status
        segments = drop_blank(split_words(continued, SEP))
    return run_pipeline(state, segments)


def dispatch(state: ShellState, line: str) -> int:
    """Run an expanded line whose unquoted pipes are already separators."""
    segments = split_words(line, SEP)
    if (len(segments) >= 2 or SEP in line) and all(
        is_well_formed(segment) for segment in segments
    ):
        return _pipe(state, line)
    return run_command(state, line)