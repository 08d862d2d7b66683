"""Quote-aware string helpers used by the shell's parser."""

from __future__ import annotations

import re
from typing import Iterable

SEP = "\x7f"
"""Internal word separator that replaces unquoted blanks and pipes."""

DQ_MARK = "\x14"
"""Stand-in for a literal double quote that must survive quote removal."""

SQ_MARK = "\x15"
"""Stand-in for a literal single quote that must survive quote removal."""

_REDIRECT_CHARS = "<>"
_ATOI_SPACE = " \t\n\v\f\r"
_REDIRECTION_PIECE = re.compile(r"<+|>+|[^<>]+")


def _quote_states(text: str):
    """Yield each character with the (in_single, in_double) state after it.

    A double quote toggles only outside single quotes and vice versa.
    """
    single = double = False
    for ch in text:
        if ch == '"' and not single:
            double = not double
        elif ch == "'" and not double:
            single = not single
        yield ch, single, double


def format_input(text: str, sep: str = SEP) -> str:
    """Replace every space outside quotes with *sep*."""
    return "".join(
        sep if ch == " " and not (single or double) else ch
        for ch, single, double in _quote_states(text)
    )


def _starts_with_redirect(text: str) -> bool:
    return bool(text) and text[0] in _REDIRECT_CHARS


def mark_leading_empty_quotes(text: str) -> str:
    """Protect a leading ``""`` or ``''`` that stands as a word of its own.

    When the line starts with an empty quoted word followed by a space or a
    redirection, the run of leading quote characters is replaced by markers
    so that later quote removal keeps them.
    """
    if text[:2] not in ('""', "''") or len(text) < 3:
        return text
    if text[2] != " " and not _starts_with_redirect(text[2:]):
        return text
    rest = text.lstrip("\"'")
    lead = text[: len(text) - len(rest)]
    return lead.translate({ord('"'): DQ_MARK, ord("'"): SQ_MARK}) + rest


def remove_if_even(text: str, ch: str) -> str:
    """Remove every *ch* when it occurs an even number of times (at least two)."""
    count = text.count(ch)
    if count > 1 and count % 2 == 0:
        return text.replace(ch, "")
    return text


def count_redirects(text: str) -> int:
    """Count the ``<`` and ``>`` characters that are not inside quotes."""
    total = 0
    single = double = False
    for ch in text:
        if ch == '"' and not single:
            double = not double
        elif ch == "'" and not double:
            single = not single
        elif ch in _REDIRECT_CHARS and not (single or double):
            total += 1
    return total


def format_redirects(text: str, sep: str = SEP) -> str:
    """Surround each unquoted redirection operator with *sep*.

    An operator is one or two redirect characters; no separator is added
    after an operator that ends the text.
    """
    out: list[str] = []
    single = double = False
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == '"' and not single:
            double = not double
        elif ch == "'" and not double:
            single = not single
        if ch in _REDIRECT_CHARS and not (single or double):
            out += (sep, ch)
            i += 1
            if i < n and text[i] in _REDIRECT_CHARS:
                out.append(text[i])
                i += 1
            if i < n:
                out.append(sep)
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def trim_spaces(text: str) -> str:
    """Strip leading and trailing spaces (tabs are kept)."""
    return text.strip(" ")


def split_redirections(text: str) -> list[str]:
    """Split text into runs of one redirect character and trimmed other parts."""
    return [
        piece if piece[0] in _REDIRECT_CHARS else trim_spaces(piece)
        for piece in _REDIRECTION_PIECE.findall(text)
    ]


def split_on(text: str, delimiter: str) -> list[str]:
    """Split on a multi-character delimiter.

    Empty fields are skipped, but the result always has one entry more than
    the number of delimiters found; missing entries are empty strings at the end.
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")
    if not text:
        return []
    words = [word for word in text.split(delimiter) if word]
    size = text.count(delimiter) + 1
    return words + [""] * (size - len(words))


def split_words(text: str, sep: str) -> list[str]:
    """Split on a single character, dropping empty fields."""
    return [word for word in text.split(sep) if word]


def parse_int(text: str) -> int:
    """Read a leading decimal integer the way ``atoi`` does.

    Leading whitespace and one sign are accepted; reading stops at the first
    non-digit; a missing number gives 0. The result wraps like a 32-bit int.
    """
    body = text.lstrip(_ATOI_SPACE)
    negative = False
    if body[:1] in ("-", "+"):
        negative = body[0] == "-"
        body = body[1:]
    match = re.match(r"[0-9]*", body)
    digits = match.group(0) if match else ""
    value = int(digits) if digits else 0
    if negative:
        value = -value
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def replace_unquoted(text: str, target: str, replacement: str) -> str:
    """Replace *target* outside quotes.

    Each kind of quote toggles its own state independently of the other.
    """
    out: list[str] = []
    single = double = False
    for ch in text:
        if ch == "'":
            single = not single
        elif ch == '"':
            double = not double
        out.append(replacement if ch == target and not (single or double) else ch)
    return "".join(out)


def has_content(text: str) -> bool:
    """Return True if text holds anything other than spaces and tabs."""
    return bool(text.strip(" \t"))


def drop_blank(items: Iterable[str]) -> list[str]:
    """Trim every item and drop those that are left blank."""
    trimmed = (trim_spaces(item) for item in items)
    return [item for item in trimmed if has_content(item)]