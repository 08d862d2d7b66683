"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TextIO

from pyminish.environment import Environment, export_arguments
from pyminish.text import parse_int

_TOO_MANY = "exit\nbash: exit: too many arguments\n"


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with the given status code."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


@dataclass
class ShellState:
    """State shared by the builtins and the executor.

    ``out`` receives a command's regular output; ``console`` receives the
    shell's own messages and defaults to ``out``.
    """

    env: Environment = field(default_factory=Environment)
    status: int = 0
    cwd: str = field(default_factory=os.getcwd)
    out: TextIO = field(default_factory=lambda: sys.stdout)
    console: TextIO | None = None
    stdin: TextIO = field(default_factory=lambda: sys.stdin)

    def __post_init__(self) -> None:
        if self.console is None:
            self.console = self.out


def _is_n_flag(arg: str) -> bool:
    return arg.startswith("-n") and set(arg[1:]) == {"n"}


def echo(args: list[str], out: TextIO) -> int:
    """Print the arguments separated by spaces; ``-n`` flags drop the newline."""
    if not args or not args[0].startswith("echo"):
        return 1
    words = args[1:]
    if not words:
        out.write("\n")
        return 1
    flags = 0
    while flags < len(words) and _is_n_flag(words[flags]):
        flags += 1
    out.write(" ".join(words[flags:]))
    if not flags:
        out.write("\n")
    return 0


def _all_digits(text: str) -> bool:
    return all(ch.isascii() and ch.isdigit() for ch in text)


def _valid_exit_argument(text: str) -> bool:
    return parse_int(text) == 0 or _all_digits(text)


def exit_builtin(state: ShellState, args: list[str]) -> int:
    """Leave the shell by raising :class:`ShellExit`, or report bad arguments."""
    count = len(args)
    if count == 1:
        raise ShellExit(0)
    if count == 2 and _valid_exit_argument(args[1]):
        code = parse_int(args[1]) if _all_digits(args[1]) else 0
        raise ShellExit(code & 0xFF)
    state.console.write(_TOO_MANY)
    if count > 2 and not _all_digits(args[1]):
        raise ShellExit(1)
    return 0


def _enterable(path: str) -> bool:
    return os.path.isdir(path) and os.access(path, os.X_OK)


def cd(state: ShellState, args: list[str]) -> int:
    """Change the shell's working directory and update ``OLDPWD``/``PWD``."""
    if not args or args[0] != "cd":
        return 1
    if len(args) < 2:
        state.console.write("cd: HOME not set\n")
        return 127
    state.env.set_entry("OLDPWD=", "OLDPWD=" + state.cwd)
    target = args[1]
    path = os.path.join(state.cwd, target) if target else ""
    if path and _enterable(path):
        state.cwd = os.path.realpath(path)
    else:
        state.console.write(f"cd: no such file or directory: {target}\n")
    state.env.set_entry("PWD=", "PWD=" + state.cwd)
    return 0


def pwd(state: ShellState, args: list[str]) -> int:
    """Print the working directory."""
    if args and args[0] == "pwd":
        state.out.write(state.cwd + "\n")
    return 0


def env_builtin(state: ShellState, args: list[str]) -> int:
    """Print the variables that have a value; arguments are not accepted."""
    if len(args) > 1:
        state.console.write(f"env: ‘{args[1]}’: No such file or directory\n")
        return 127
    lines = state.env.env_lines()
    for line in lines:
        state.out.write(line + "\n")
    return 0 if len(state.env) else 1


def export_builtin(state: ShellState, args: list[str]) -> int:
    """List the environment, or export each valid ``NAME[=value]`` argument."""
    rest = args[1:]
    text = export_arguments(state.env, rest)
    (state.console if rest else state.out).write(text)
    return 0


def unset_builtin(state: ShellState, args: list[str]) -> int:
    """Remove the named variables in order.

    Names before the first one holding ``=`` are removed; that name stops
    the command and gives -1.
    """
    for index, name in enumerate(args):
        if "=" in name:
            if index:
                state.env.unset(args[:index])
            return -1
    state.env.unset(args)
    return 0


def _run_echo(state: ShellState, args: list[str]) -> int:
    return echo(args, state.out)


_BUILTINS: dict[str, Callable[[ShellState, list[str]], int]] = {
    "export": export_builtin,
    "env": env_builtin,
    "unset": unset_builtin,
    "cd": cd,
    "pwd": pwd,
    "echo": _run_echo,
}


def run_builtin(state: ShellState, args: list[str]) -> bool:
    """Run *args* if it names a builtin and return True; otherwise return False.

    The builtin's result becomes ``state.status``; ``exit`` leaves the
    status unchanged when it does not end the shell.
    """
    if not args:
        return False
    name = args[0]
    if name == "exit":
        exit_builtin(state, args)
        return True
    handler = _BUILTINS.get(name)
    if handler is None:
        return False
    state.status = handler(state, args)
    return True