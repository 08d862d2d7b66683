"""The shell's list of environment entries and the export/unset rules."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from pyminish.text import remove_if_even

_DECLARE = "declare -x "
_EMPTY_VALUE = '""'


def _is_alpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def get_name(text: str | None) -> str | None:
    """Return the name part of ``NAME=value`` including the ``=`` if present."""
    if not text:
        return None
    name, eq, _ = text.partition("=")
    return name + eq


def check_identifier(text: str) -> bool:
    """Return True if text is a valid name for export.

    It must start with a letter; up to the first ``=`` only letters,
    digits and underscores may follow.
    """
    if not text or not _is_alpha(text[0]):
        return False
    for ch in text:
        if ch == "=":
            return True
        if not (_is_alnum(ch) or ch == "_"):
            return False
    return True


def join_entry(name: str | None, value: str | None) -> str | None:
    """Build an entry from a name (maybe ending in ``=``) and a value.

    A name ending in ``=`` without a value gets an explicit empty ``""``.
    """
    if name is None:
        return None
    if value is None and "=" not in name:
        return name
    if value is not None:
        return name + value
    return name + _EMPTY_VALUE


def _quote_for_listing(entry: str) -> str:
    if '"' in entry or "=" not in entry:
        return entry
    last = len(entry) - 1
    return "".join(
        ch + '"' if ch == "=" or pos == last else ch for pos, ch in enumerate(entry)
    )


class Environment:
    """Ordered list of ``NAME=value`` (or bare ``NAME``) entries."""

    def __init__(self, entries: Iterable[str] | Mapping[str, str] = ()) -> None:
        if isinstance(entries, Mapping):
            entries = (f"{key}={value}" for key, value in entries.items())
        self.entries: list[str] = list(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, name: str) -> str | None:
        """Return the value of *name*, or None if it is not set with ``=``."""
        size = len(name)
        for entry in self.entries:
            if entry.startswith(name) and entry[size : size + 1] == "=":
                return entry[size + 1 :]
        return None

    def set_entry(self, prefix: str, value: str) -> None:
        """Replace the first entry starting with *prefix* by the whole entry *value*."""
        for index, entry in enumerate(self.entries):
            if entry.startswith(prefix):
                self.entries[index] = value
                return

    def replace(self, name: str, value: str | None) -> bool:
        """Update an existing entry for *name*; return False if there is none."""
        size = len(name) - 1 if "=" in name else len(name)
        key = name[:size]
        for index, entry in enumerate(self.entries):
            if entry[:size] == key and entry[size : size + 1] in ("=", ""):
                if value is None and "=" in name:
                    self.entries[index] = join_entry(name, value)
                    return True
                current = entry[entry.find("=") :] if "=" in entry else ""
                if len(current) > 1 and value is None:
                    return True
                self.entries[index] = join_entry(name, value)
                return True
        return False

    def export(self, name: str, value: str | None) -> None:
        """Set *name* to *value*, adding a new entry when none exists."""
        if not self.replace(name, value):
            entry = join_entry(name, value)
            if entry is not None:
                self.entries.append(entry)

    def unset(self, names: Iterable[str]) -> bool:
        """Remove each named variable.

        Stops and returns False at the first name holding ``=``.
        """
        for name in names:
            if "=" in name:
                return False
            size = len(name)
            self.entries = [
                entry
                for entry in self.entries
                if not (
                    entry.startswith(name)
                    and (entry[size : size + 1] == "=" or len(entry) == size)
                )
            ]
        return True

    def env_lines(self) -> list[str]:
        """Entries shown by ``env``: those with a value, except ``=''`` ones."""
        return [
            entry
            for entry in self.entries
            if "=" in entry and entry[entry.rindex("=") :] != "=''"
        ]

    def export_lines(self) -> list[str]:
        """Sorted ``declare -x`` lines shown by ``export`` without arguments."""
        return [_DECLARE + _quote_for_listing(entry) for entry in sorted(self.entries)]

    def strip_quotes(self) -> None:
        """Drop double quotes from entries that hold an even number of them."""
        self.entries = [remove_if_even(entry, '"') for entry in self.entries]


def _export_one(env: Environment, arg: str) -> None:
    arg = remove_if_even(arg, '"')
    name = get_name(arg)
    if name is None:
        return
    _, eq, value = arg.partition("=")
    if not eq or not value:
        env.export(name, None)
    else:
        env.export(name, value)


def export_arguments(env: Environment, args: list[str]) -> str:
    """Run ``export`` on the arguments that follow the command name.

    Returns the text to print: the listing when there are no arguments,
    otherwise one error line per invalid identifier.
    """
    if not args:
        return "".join(line + "\n" for line in env.export_lines())
    messages: list[str] = []
    for arg in args:
        if check_identifier(arg):
            _export_one(env, arg)
        else:
            messages.append(f"bash: export: `{arg}': not a valid identifier\n")
    return "".join(messages)