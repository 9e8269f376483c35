"""Ordered property maps and the flat ``styleLess`` serialization.

Declarations are plain ``dict[str, str]`` objects; insertion order is the
emission order. Re-assigning an existing key keeps its original position,
which matches how the target tool orders properties.
"""

from __future__ import annotations

from typing import Iterable, Mapping

Declarations = dict[str, str]


def split_top_level(text: str, separator: str) -> list[str]:
    """Split *text* on *separator* outside parentheses and quoted strings.

    Empty pieces are dropped and each piece is stripped.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            piece = "".join(current).strip()
            if piece:
                parts.append(piece)
            current = []
            continue
        current.append(ch)
    piece = "".join(current).strip()
    if piece:
        parts.append(piece)
    return parts


def closing_paren(text: str, open_index: int) -> int | None:
    """Index of the ")" matching the "(" at *open_index*, or None if unbalanced."""
    depth = 0
    for i in range(open_index, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return None


def split_whitespace(value: str) -> list[str]:
    """Split a value on whitespace that is not inside parentheses."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for ch in value:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch.isspace() and depth == 0:
            if current:
                parts.append("".join(current))
                current = []
            continue
        current.append(ch)
    if current:
        parts.append("".join(current))
    return parts


def to_style_less(decls: Mapping[str, str]) -> str:
    """Serialize declarations as ``prop: value; prop: value;``."""
    return " ".join(f"{name}: {value};" for name, value in decls.items())


def parse_style_less(text: str | None) -> Declarations:
    """Parse a ``styleLess`` string back into ordered declarations.

    Later duplicates win. Malformed pieces without a name or value are
    skipped.
    """
    decls: Declarations = {}
    if not text:
        return decls
    for piece in split_top_level(text, ";"):
        name, sep, value = piece.partition(":")
        name, value = name.strip(), value.strip()
        if sep and name and value:
            decls[name] = value
    return decls


def merge_declarations(existing: Mapping[str, str], incoming: Mapping[str, str]) -> Declarations:
    """Merge with later-wins semantics for the same property."""
    merged = dict(existing)
    merged.update(incoming)
    return merged


def merge_preserving(existing: Mapping[str, str], incoming: Mapping[str, str]) -> Declarations:
    """Merge where properties already present in *existing* win."""
    merged = dict(existing)
    for name, value in incoming.items():
        merged.setdefault(name, value)
    return merged


def merge_all(layers: Iterable[Mapping[str, str]]) -> Declarations:
    merged: Declarations = {}
    for layer in layers:
        merged.update(layer)
    return merged
