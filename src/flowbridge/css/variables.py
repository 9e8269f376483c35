"""Custom-property table and ``var()`` resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from flowbridge.model.declarations import closing_paren, split_top_level

__all__ = ["VariableTable", "Resolution", "resolve_value"]

# Opening of a var() call; its arguments are found by paren matching.
_VAR_START_RE = re.compile(r"(?<![\w-])var\(", re.IGNORECASE)
_VAR_NAME_RE = re.compile(r"(?<![\w-])var\(\s*(--[\w-]+)", re.IGNORECASE)


class VariableTable:
    """Append-only custom-property table where the first definition wins."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def define(self, name: str, value: str) -> bool:
        """Record *name* unless it is already defined. Returns True if stored."""
        if name in self._values:
            return False
        self._values[name] = value.strip()
        return True

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)


@dataclass(frozen=True)
class Resolution:
    value: str
    unresolved: tuple[str, ...] = ()

    @property
    def has_unresolved(self) -> bool:
        return bool(self.unresolved)


def _strip_quotes(value: str, keep_quotes: bool) -> str:
    value = value.strip()
    if keep_quotes or len(value) < 2:
        return value
    if value[0] in "\"'" and value[0] == value[-1]:
        return value[1:-1]
    return value


def _substitute(value: str, table: VariableTable, keep_quotes: bool, unresolved: list[str]) -> str:
    """Replace each outermost ``var()`` call in *value* once."""
    pieces: list[str] = []
    pos = 0
    while True:
        match = _VAR_START_RE.search(value, pos)
        if match is None:
            break
        close = closing_paren(value, match.end() - 1)
        if close is None:
            break
        args = split_top_level(value[match.end():close], ",")
        name = args[0] if args else ""
        fallback = ", ".join(args[1:])
        pieces.append(value[pos:match.start()])

        defined = table.get(name) if name.startswith("--") else None
        if defined is not None:
            pieces.append(_strip_quotes(defined, keep_quotes))
        elif fallback:
            pieces.append(_strip_quotes(fallback, keep_quotes))
        elif name.startswith("--"):
            if name not in unresolved:
                unresolved.append(name)
            pieces.append(f"var({name})")
        else:
            pieces.append(value[match.start():close + 1])
        pos = close + 1
    pieces.append(value[pos:])
    return "".join(pieces)


def resolve_value(
    value: str,
    table: VariableTable,
    property_name: str = "",
    max_depth: int = 5,
) -> Resolution:
    """Substitute ``var()`` references in *value*.

    Runs up to *max_depth* passes so chained variables resolve while
    self-referencing ones terminate. Fallbacks may contain nested calls
    such as ``rgb(0, 0, 0)``. Any reference still present after the last
    pass is left as ``var(--name)`` and reported in ``unresolved``.
    Quotes around substituted values are kept only for ``font-family``.
    """
    keep_quotes = property_name.lower() == "font-family"
    unresolved: list[str] = []

    result = value
    for _ in range(max_depth):
        if not _VAR_START_RE.search(result):
            break
        result = _substitute(result, table, keep_quotes, unresolved)

    for name in _VAR_NAME_RE.findall(result):
        if name not in unresolved:
            unresolved.append(name)
    return Resolution(value=result.strip(), unresolved=tuple(unresolved))
