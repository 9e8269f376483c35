"""Per-rule declaration normalization.

Each raw ``(name, value)`` pair goes through, in order: the strip list,
custom-property skipping, ``var()`` resolution, functional rewriting,
``flex``/``border`` expansion, the allowlist, box shorthands and grid
placement. The output is an ordered declarations mapping with later
declarations winning.
"""

from __future__ import annotations

from typing import Iterable

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.css.variables import VariableTable, resolve_value
from flowbridge.model.declarations import Declarations
from flowbridge.model.diagnostic import DiagnosticCollector
from flowbridge.normalize.properties import SHORTHAND_EXPANSIONS, STRIP_PROPERTIES, is_supported
from flowbridge.normalize.shorthand import (
    expand_border,
    expand_flex,
    expand_grid_placement,
    expand_shorthand,
)
from flowbridge.normalize.values import rewrite_functional_values

__all__ = ["normalize_declarations"]

_PLACEMENT_LONGHANDS = {
    "grid-column": ("grid-column-start", "grid-column-end"),
    "grid-row": ("grid-row-start", "grid-row-end"),
}


def normalize_declarations(
    pairs: Iterable[tuple[str, str]],
    variables: VariableTable,
    collector: DiagnosticCollector,
    *,
    selector: str | None = None,
    allowed: frozenset[str] | None = None,
    config: ConverterConfig | None = None,
) -> Declarations:
    """Normalize raw declaration pairs into target-ready declarations.

    Args:
        pairs: Output of ``split_declarations``.
        variables: Custom-property table for ``var()`` resolution.
        collector: Receives ``variable_unresolved`` and
            ``unsupported_property`` warnings.
        selector: Source selector, attached to warnings.
        allowed: When given, only longhands in this set are kept and
            nothing outside it is reported (element-selector recovery).
        config: Converter configuration.
    """
    config = resolve_config(config)
    result: Declarations = {}

    for name, raw in pairs:
        if name in STRIP_PROPERTIES or name.startswith("--"):
            continue
        if allowed is not None and not _may_yield(name, allowed):
            continue

        resolution = resolve_value(raw, variables, name, config.max_variable_depth)
        if resolution.has_unresolved:
            collector.warn(
                "variable_unresolved",
                f"Unresolved CSS variable in: {name}: {raw}",
                selector=selector,
                property=name,
            )
        value = rewrite_functional_values(resolution.value)

        expanded = _expand(name, value, collector, selector, report=allowed is None)
        for longhand, longhand_value in expanded.items():
            if allowed is not None and longhand not in allowed:
                continue
            result[longhand] = longhand_value
    return result


def _may_yield(name: str, allowed: frozenset[str]) -> bool:
    if name in allowed:
        return True
    return any(longhand in allowed for longhand in SHORTHAND_EXPANSIONS.get(name, ()))


def _expand(
    name: str,
    value: str,
    collector: DiagnosticCollector,
    selector: str | None,
    *,
    report: bool,
) -> Declarations:
    if name in ("flex", "border"):
        expanded = expand_flex(value) if name == "flex" else expand_border(value)
        if not expanded and report:
            collector.warn(
                "unsupported_property",
                f"Unparsed {name} shorthand: {value}",
                selector=selector,
                property=name,
            )
        return expanded

    if not is_supported(name):
        if report:
            collector.warn(
                "unsupported_property",
                f"Unsupported CSS property: {name}",
                selector=selector,
                property=name,
            )
        return {}

    if name in SHORTHAND_EXPANSIONS:
        return expand_shorthand(name, value)

    if name in _PLACEMENT_LONGHANDS:
        placement = expand_grid_placement(value)
        if placement is not None:
            start, end = _PLACEMENT_LONGHANDS[name]
            return {start: placement[0], end: placement[1]}
    return {name: value}
