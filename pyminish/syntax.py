"""Checks that reject badly formed command lines before they are run."""

from __future__ import annotations

_BLANKS = " \t"


def valid_pipes(text: str) -> bool:
    """Return False when an unquoted ``|`` is followed (after blanks) by another ``|``.

    A pipe at the very end of the line is accepted; the character that
    follows the blanks after a pipe is not examined for quotes.
    """
    single = double = False
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == '"' and not single:
            double = not double
        elif ch == "'" and not double:
            single = not single
        elif ch == "|" and not (single or double):
            i += 1
            while i < n and text[i] in _BLANKS:
                i += 1
            if i == n:
                return True
            if text[i] == "|":
                return False
        i += 1
    return True


def pipes_start_ok(text: str) -> bool:
    """Return False when the first non-space character is a pipe."""
    return not text.lstrip(" ").startswith("|")


def _quotes_balanced(text: str) -> bool:
    single = double = False
    for ch in text:
        if ch == '"' and not single:
            double = not double
        elif ch == "'" and not double:
            single = not single
    return not (single or double)


def is_well_formed(text: str) -> bool:
    """Return True when quotes are closed and the pipes are placed correctly."""
    return _quotes_balanced(text) and valid_pipes(text) and pipes_start_ok(text)