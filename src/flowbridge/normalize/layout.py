"""Explicit layout defaults for flex and grid containers.

The target does not apply browser-implicit layout behavior, so a bare
``display: flex`` must carry its direction and alignment explicitly.
"""

from __future__ import annotations

from typing import Mapping

from flowbridge.model.declarations import Declarations

__all__ = ["FLEX_DISPLAYS", "GRID_DISPLAYS", "apply_layout_defaults", "is_layout_container"]

FLEX_DISPLAYS = frozenset({"flex", "inline-flex"})
GRID_DISPLAYS = frozenset({"grid", "inline-grid"})

_FLEX_DEFAULTS = (
    ("flex-direction", "row"),
    ("justify-content", "flex-start"),
    ("align-items", "stretch"),
)

_GRID_TEMPLATE_KEYS = (
    "grid-template-columns",
    "grid-template-rows",
    "grid-auto-columns",
    "grid-auto-rows",
)


def _display(decls: Mapping[str, str]) -> str:
    return decls.get("display", "").strip().lower()


def is_layout_container(decls: Mapping[str, str]) -> bool:
    return _display(decls) in FLEX_DISPLAYS | GRID_DISPLAYS


def apply_layout_defaults(decls: Mapping[str, str]) -> tuple[Declarations, list[str]]:
    """Return *decls* with missing flex/grid defaults appended.

    The second element lists the injected ``prop: value`` pairs, empty
    when nothing was added.
    """
    result = dict(decls)
    added: list[str] = []

    def put(name: str, value: str) -> None:
        result[name] = value
        added.append(f"{name}: {value}")

    display = _display(result)
    if display in FLEX_DISPLAYS:
        for name, value in _FLEX_DEFAULTS:
            if name not in result:
                put(name, value)

    elif display in GRID_DISPLAYS:
        if not any(key in result for key in _GRID_TEMPLATE_KEYS):
            put("grid-template-columns", "1fr")
        if (
            "grid-template-columns" in result
            and "grid-template-rows" not in result
            and "grid-auto-rows" not in result
        ):
            put("grid-template-rows", "auto")
            put("grid-auto-rows", "auto")
            if "grid-auto-flow" not in result:
                put("grid-auto-flow", "row")
        if "justify-items" not in result:
            put("justify-items", "stretch")
        if "align-items" not in result:
            put("align-items", "stretch")

    return result, added
