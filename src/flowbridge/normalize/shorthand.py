"""Shorthand expansion: box shorthands, flex, border and grid placement."""

from __future__ import annotations

import re

from flowbridge.model.declarations import Declarations, split_whitespace
from flowbridge.normalize.properties import SHORTHAND_EXPANSIONS

__all__ = [
    "BORDER_STYLES",
    "box_values",
    "expand_border",
    "expand_flex",
    "expand_grid_placement",
    "expand_shorthand",
]

BORDER_STYLES = frozenset({
    "none", "hidden", "dotted", "dashed", "solid", "double",
    "groove", "ridge", "inset", "outset",
})

_NUMBER_RE = re.compile(r"^-?\d*\.?\d+$")
_INTEGER_RE = re.compile(r"^-?\d+$")
_BORDER_WIDTH_RE = re.compile(
    r"^(\d+(\.\d+)?(px|em|rem|pt|pc|in|cm|mm|ex|ch|vw|vh|vmin|vmax|%)|thin|medium|thick)$",
    re.IGNORECASE,
)


def box_values(value: str) -> list[str]:
    """Apply the CSS 1/2/3/4-value rule.

    Returns top, right, bottom, left. More than four values cannot be
    positioned, so the raw value is repeated.
    """
    parts = split_whitespace(value)
    if len(parts) == 1:
        return [parts[0]] * 4
    if len(parts) == 2:
        return [parts[0], parts[1], parts[0], parts[1]]
    if len(parts) == 3:
        return [parts[0], parts[1], parts[2], parts[1]]
    if len(parts) == 4:
        return parts
    return [value.strip()] * 4


def expand_shorthand(name: str, value: str) -> Declarations:
    """Expand ``padding``/``margin``/``border-radius``/``gap``.

    Other properties come back unchanged as a single-entry mapping.
    """
    longhands = SHORTHAND_EXPANSIONS.get(name)
    if longhands is None:
        return {name: value}
    if name == "gap":
        parts = split_whitespace(value)
        if not parts:
            return {}
        row = parts[0]
        column = parts[1] if len(parts) > 1 else row
        return {"row-gap": row, "column-gap": column}
    return dict(zip(longhands, box_values(value)))


def expand_flex(value: str) -> Declarations:
    """Expand the ``flex`` shorthand into grow/shrink/basis.

    Returns an empty mapping for forms that cannot be disambiguated.
    """
    text = " ".join(value.split())
    if not text:
        return {}
    keywords = {
        "none": ("0", "0", "auto"),
        "auto": ("1", "1", "auto"),
        "initial": ("0", "1", "auto"),
    }
    if text in keywords:
        grow, shrink, basis = keywords[text]
        return {"flex-grow": grow, "flex-shrink": shrink, "flex-basis": basis}

    parts = text.split(" ")
    if len(parts) == 1:
        if _NUMBER_RE.match(parts[0]):
            return {"flex-grow": parts[0], "flex-shrink": "1", "flex-basis": "0%"}
        return {}
    if len(parts) == 2:
        first, second = parts
        if _NUMBER_RE.match(first) and _NUMBER_RE.match(second):
            return {"flex-grow": first, "flex-shrink": second, "flex-basis": "0%"}
        if _NUMBER_RE.match(first):
            return {"flex-grow": first, "flex-shrink": "1", "flex-basis": second}
        return {}
    grow, shrink, *basis = parts
    if _NUMBER_RE.match(grow) and _NUMBER_RE.match(shrink):
        return {"flex-grow": grow, "flex-shrink": shrink, "flex-basis": " ".join(basis)}
    return {}


def expand_border(value: str) -> Declarations:
    """Expand ``border`` into width/style/color longhands."""
    text = value.strip()
    if not text or text in ("none", "0"):
        return {"border-width": "0", "border-style": "none", "border-color": "transparent"}

    width = style = color = None
    for part in split_whitespace(text):
        if _BORDER_WIDTH_RE.match(part):
            width = width or part
        elif part.lower() in BORDER_STYLES:
            style = style or part
        else:
            color = color or part
    return {
        "border-width": width or "medium",
        "border-style": style or "none",
        "border-color": color or "currentColor",
    }


def expand_grid_placement(value: str) -> tuple[str, str] | None:
    """Split ``grid-column``/``grid-row`` into ``(start, end)``.

    >>> expand_grid_placement("span 2")
    ('auto', 'span 2')
    >>> expand_grid_placement("1 / 3")
    ('1', '3')
    """
    text = value.strip()
    if not text:
        return None
    if text.startswith("span "):
        return "auto", " ".join(text.split())
    if "/" in text:
        parts = [p.strip() for p in text.split("/") if p.strip()]
        if len(parts) >= 2:
            return parts[0], parts[1]
    if _INTEGER_RE.match(text):
        return text, "auto"
    return None
