"""Variable expansion and quote removal for command lines."""

from __future__ import annotations

import re

from pyminish.environment import Environment
from pyminish.text import DQ_MARK, SQ_MARK

QUOTE_MARK = "\x1b"
"""Stand-in for a single quote that came from a variable's value."""

PIPE_MARK = "\x17"
"""Stand-in for a pipe that came from a variable's value."""

_NAME = re.compile(r"[A-Za-z0-9_]*")
_NAME_START = "_?'\""
_RESTORE = str.maketrans(
    {DQ_MARK: '"', SQ_MARK: "'", QUOTE_MARK: "'", PIPE_MARK: "|"}
)


def _may_follow_dollar(ch: str) -> bool:
    return (ch.isascii() and ch.isalnum()) or ch in _NAME_START


def expand_variables(text: str, env: Environment, status: int) -> str:
    """Expand ``$NAME`` and ``$?`` outside single quotes; quotes are kept.

    Quotes and pipes in substituted values are replaced by markers so that
    later quote handling and pipe splitting leave them alone. An unknown
    variable expands to nothing.
    """
    out: list[str] = []
    single = double = False
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == "'" and not double:
            single = not single
            out.append(ch)
        elif ch == '"' and not single:
            double = not double
            out.append(ch)
        elif ch == "$" and i + 1 < n and _may_follow_dollar(text[i + 1]) and not single:
            i += 1
            if text[i] == "?":
                out.append(str(status))
            else:
                match = _NAME.match(text, i)
                value = env.get(match.group(0))
                if value:
                    out.append(value.replace("'", QUOTE_MARK).replace("|", PIPE_MARK))
                i = match.end() - 1
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def remove_quotes(text: str) -> str:
    """Remove quoting characters and turn protected markers back into text."""
    out: list[str] = []
    single = double = False
    for ch in text:
        if ch == "'" and not double:
            single = not single
        elif ch == '"' and not single:
            double = not double
        else:
            out.append(ch)
    return "".join(out).translate(_RESTORE)