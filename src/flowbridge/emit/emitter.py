"""Style graph emitter: ClassIndex -> target style nodes."""

from __future__ import annotations

import logging
from typing import Mapping

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.emit.grid import normalize_grid_styles
from flowbridge.emit.ids import IdRegistry
from flowbridge.model.class_index import ClassIndex, ClassIndexEntry
from flowbridge.model.declarations import Declarations, merge_all
from flowbridge.model.payload import WebflowNode, WebflowStyle
from flowbridge.normalize.layout import GRID_DISPLAYS

__all__ = ["BREAKPOINT_VARIANTS", "emit_style", "emit_styles", "embed_node"]

logger = logging.getLogger(__name__)

# External variant key -> internal breakpoint tiers merged into it (later wins).
BREAKPOINT_VARIANTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("main", ("desktop",)),
    ("medium", ("medium",)),
    ("small", ("small",)),
    ("tiny", ("tiny",)),
    ("xl", ("xlarge",)),
    ("xxl", ("xxlarge", "xxxlarge")),
)

_PSEUDO_VARIANTS = ("hover", "focus", "active", "visited")
_QUOTES = "\"'"


def _unquote(decls: Mapping[str, str]) -> Declarations:
    """Strip quotes from ``'prop': 'value'`` pairs that leaked into a bucket."""
    result: Declarations = {}
    for name, value in decls.items():
        if len(name) >= 2 and name[0] in _QUOTES and name[-1] == name[0]:
            name = name[1:-1]
            if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
                value = value[1:-1]
        result[name] = value
    return result


def _is_grid(display: str | None) -> bool:
    return (display or "").strip().lower() in GRID_DISPLAYS


def _finish(decls: Mapping[str, str], *, is_grid: bool, config: ConverterConfig) -> Declarations:
    return _unquote(normalize_grid_styles(decls, is_grid=is_grid, config=config))


def emit_style(
    entry: ClassIndexEntry,
    registry: IdRegistry,
    config: ConverterConfig | None = None,
) -> WebflowStyle:
    """Convert one class index entry into a target style node."""
    config = resolve_config(config)
    base_display = entry.base.get("display")
    variants: dict[str, Declarations] = {}

    for state in _PSEUDO_VARIANTS:
        decls = entry.pseudo.get(state)
        if decls:
            display = decls.get("display", base_display)
            variants[state] = _finish(decls, is_grid=_is_grid(display), config=config)

    for key, tiers in BREAKPOINT_VARIANTS:
        decls = merge_all(entry.breakpoints.get(tier, {}) for tier in tiers)
        if decls:
            display = decls.get("display", base_display)
            variants[key] = _finish(decls, is_grid=_is_grid(display), config=config)

    return WebflowStyle(
        id=registry.style_id(entry.class_name),
        name=entry.class_name,
        base=_finish(entry.base, is_grid=_is_grid(base_display), config=config),
        variants=variants,
        children=list(entry.children),
        is_combo=entry.is_combo,
    )


def emit_styles(
    index: ClassIndex,
    registry: IdRegistry | None = None,
    config: ConverterConfig | None = None,
) -> list[WebflowStyle]:
    """Emit a style node for every entry that carries any content.

    Entries with no base, pseudo or breakpoint declarations are dropped.
    Identifiers come from *registry*, so nodes built with the same registry
    reference the same style ids.
    """
    config = resolve_config(config)
    if registry is None:
        registry = IdRegistry(config.id_prefix)
    styles = [
        emit_style(entry, registry, config)
        for entry in index.classes.values()
        if entry.has_content()
    ]
    logger.debug("Emitted %d styles from %d classes", len(styles), len(index))
    return styles


def embed_node(css: str, registry: IdRegistry) -> WebflowNode:
    """Wrap verbatim CSS in an ``HtmlEmbed`` node carrying a ``<style>`` block."""
    html = f"<style>\n{css}\n</style>"
    return WebflowNode(
        id=registry.node_id("non-standard-css"),
        type="HtmlEmbed",
        tag="div",
        data={
            "embed": {
                "type": "html",
                "meta": {"html": html, "div": False, "script": False, "compilable": False, "iframe": False},
            },
            "insideRTE": False,
        },
    )
