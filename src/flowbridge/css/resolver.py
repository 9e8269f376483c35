"""Cascade resolver and breakpoint router.

Builds a ``ClassIndex`` from CSS text:

1. extract base rules, media blocks and the variable table;
2. route base rules into base and pseudo-state buckets;
3. route each media block by its classified query, inverting
   mobile-first ``min-width`` cascades into desktop-first overrides;
4. fill missing typography/spacing from bare element selectors;
5. make flex/grid layout defaults explicit.
"""

from __future__ import annotations

import logging
from typing import Mapping

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.css.extractor import AtRule, CssRule, MediaBlock, extract_rules, split_declarations
from flowbridge.css.media import MediaRoute, RouteKind, classify_media_query
from flowbridge.css.selectors import (
    ELEMENT_TO_CLASS,
    STRUCTURAL_ELEMENTS,
    SelectorTarget,
    parse_selector,
    split_selector_list,
)
from flowbridge.css.variables import VariableTable
from flowbridge.model.class_index import ClassIndex, ClassIndexEntry
from flowbridge.model.declarations import (
    Declarations,
    merge_declarations,
    merge_preserving,
)
from flowbridge.model.diagnostic import DiagnosticCollector
from flowbridge.normalize.declarations import normalize_declarations
from flowbridge.normalize.layout import apply_layout_defaults, is_layout_container
from flowbridge.normalize.properties import SPACING_LONGHANDS, TYPOGRAPHY_PROPERTIES

__all__ = ["build_class_index", "invert_min_width"]

logger = logging.getLogger(__name__)

_TYPOGRAPHY_ONLY = frozenset(TYPOGRAPHY_PROPERTIES)
_TYPOGRAPHY_AND_SPACING = frozenset(TYPOGRAPHY_PROPERTIES | SPACING_LONGHANDS)

# At-rules that never contain class rules and need no diagnostics.
_SILENT_AT_RULES = frozenset({
    "font-face", "supports", "layer", "import", "charset", "namespace", "page",
})


def invert_min_width(
    entry: ClassIndexEntry,
    decls: Mapping[str, str],
    override_tiers: tuple[str, ...],
) -> None:
    """Promote mobile-first *decls* into the desktop base of *entry*.

    For each property, the value it held in the base before promotion is
    backfilled into every tier in *override_tiers* without overwriting
    what those tiers already declare. With no override tiers the
    declarations simply merge into the base.
    """
    if not override_tiers:
        entry.base = merge_declarations(entry.base, decls)
        return

    base = dict(entry.base)
    for name, value in decls.items():
        previous = base.get(name)
        if previous is not None:
            for tier in override_tiers:
                entry.breakpoints[tier] = merge_preserving(
                    entry.breakpoints.get(tier, {}), {name: previous}
                )
        base[name] = value
    entry.base = base


class _IndexBuilder:
    """Mutable state for a single ``build_class_index`` call."""

    def __init__(self, variables: VariableTable, config: ConverterConfig) -> None:
        self.variables = variables
        self.config = config
        self.collector = DiagnosticCollector()
        self.classes: dict[str, ClassIndexEntry] = {}
        self.non_standard: list[str] = []
        self.element_styles: dict[str, Declarations] = {}

    # -- entries -------------------------------------------------------------

    def entry(self, class_name: str) -> ClassIndexEntry:
        if class_name not in self.classes:
            self.classes[class_name] = ClassIndexEntry(class_name=class_name)
        return self.classes[class_name]

    def _register(self, target: SelectorTarget, decls: Mapping[str, str], *, at_base: bool) -> ClassIndexEntry:
        if target.class_name is None:
            raise ValueError(f"selector {target.selector!r} names no class")
        entry = self.entry(target.class_name)
        entry.selectors.append(target.selector)
        if target.is_combo:
            entry.is_combo = True
        if is_layout_container(decls):
            entry.is_layout_container = True

        if target.combo_parent:
            entry.combo_parent = target.combo_parent
            self.entry(target.combo_parent).add_child(target.class_name)

        if target.is_descendant and target.parent_classes:
            for parent in target.parent_classes:
                entry.add_parent(parent)
                self.entry(parent).add_child(target.class_name)
            if at_base and target.pseudo is None:
                parents = ", .".join(target.parent_classes)
                self.collector.warn(
                    "complex_selector",
                    f'Descendant selector "{target.selector}" flattened to '
                    f".{target.class_name}. Parent context from .{parents} may be lost.",
                    selector=target.selector,
                )
        return entry

    def _targets(self, selector_text: str, *, in_media: bool) -> list[SelectorTarget]:
        targets: list[SelectorTarget] = []
        for selector in split_selector_list(selector_text):
            target = parse_selector(selector)
            if target.class_name is None:
                continue
            if target.is_element:
                if not in_media:
                    targets.append(target)
                continue
            if target.unsupported:
                self.collector.warn(
                    "unsupported_selector",
                    f'Selector "{selector}" skipped: {target.unsupported}.',
                    selector=selector,
                )
                continue
            if target.pseudo is not None and (in_media or target.pseudo_bucket is None):
                reason = "inside a media query" if in_media else "not representable"
                self.collector.warn(
                    "unsupported_selector",
                    f'Pseudo selector "{selector}" skipped: :{target.pseudo} {reason}.',
                    selector=selector,
                )
                continue
            targets.append(target)
        return targets

    def _normalize(self, rule: CssRule, allowed: frozenset[str] | None = None) -> Declarations:
        return normalize_declarations(
            split_declarations(rule.body),
            self.variables,
            self.collector,
            selector=rule.selector,
            allowed=allowed,
            config=self.config,
        )

    # -- base scope ----------------------------------------------------------

    def add_base_rule(self, rule: CssRule) -> None:
        targets = self._targets(rule.selector, in_media=False)
        if not targets:
            return

        class_targets = [t for t in targets if not t.is_element]
        elements = [t.element for t in targets if t.element is not None]

        if class_targets:
            decls = self._normalize(rule)
            if decls:
                for target in class_targets:
                    entry = self._register(target, decls, at_base=True)
                    bucket = target.pseudo_bucket
                    if bucket is None:
                        entry.base = merge_declarations(entry.base, decls)
                    else:
                        entry.pseudo[bucket] = merge_declarations(entry.pseudo.get(bucket, {}), decls)

        for element in elements:
            allowed = _TYPOGRAPHY_AND_SPACING if element in STRUCTURAL_ELEMENTS else _TYPOGRAPHY_ONLY
            decls = self._normalize(rule, allowed)
            if decls:
                self.element_styles[element] = merge_declarations(
                    self.element_styles.get(element, {}), decls
                )

    # -- media scope ---------------------------------------------------------

    def add_media_block(self, block: MediaBlock) -> None:
        route = classify_media_query(block.query, self.config)
        logger.debug("@media %s -> %s %s", block.query, route.kind.value, route.tier or "")

        if route.kind is RouteKind.NON_STANDARD:
            self.divert(block.raw, f"Non-standard media query @media {block.query} ({route.reason})")
            return
        if route.rounded:
            self._note_rounding(block.query, route)

        for rule in block.rules:
            targets = self._targets(rule.selector, in_media=True)
            if not targets:
                continue
            decls = self._normalize(rule)
            if not decls:
                continue
            for target in targets:
                entry = self._register(target, decls, at_base=False)
                self._route(entry, decls, route)

    def _route(self, entry: ClassIndexEntry, decls: Declarations, route: MediaRoute) -> None:
        if route.kind in (RouteKind.MAX_WIDTH, RouteKind.MIN_WIDTH_UP):
            if route.tier is None:
                raise ValueError(f"{route.kind.value} route has no tier")
            entry.breakpoints[route.tier] = merge_declarations(entry.breakpoints.get(route.tier, {}), decls)
        elif route.kind is RouteKind.MIN_WIDTH_INVERT:
            invert_min_width(entry, decls, route.override_tiers)
        else:
            entry.base = merge_declarations(entry.base, decls)

    def _note_rounding(self, query: str, route: MediaRoute) -> None:
        if route.tier is not None:
            target = route.tier
        else:
            target = "base with backfill into " + ", ".join(route.override_tiers)
        self.collector.info(
            "breakpoint_rounded",
            f"Media query @media {query} ({route.threshold_px:g}px) does not sit on a "
            f"standard breakpoint; mapped to {target}.",
        )

    def divert(self, raw: str, message: str) -> None:
        self.non_standard.append(raw)
        self.collector.warn("non_standard_media", message)

    # -- other at-rules ------------------------------------------------------

    def add_at_rule(self, at_rule: AtRule) -> None:
        if at_rule.name == "container":
            self.divert(at_rule.raw, f"Container query @container {at_rule.prelude} kept verbatim")
        elif at_rule.name.endswith("keyframes"):
            self.collector.warn(
                "animation",
                f"Animation @keyframes {at_rule.prelude} dropped; the target has no keyframes.",
            )
        elif at_rule.name not in _SILENT_AT_RULES:
            logger.debug("Skipping @%s %s", at_rule.name, at_rule.prelude)

    # -- finishing passes ----------------------------------------------------

    def merge_element_styles(self) -> None:
        for element, decls in self.element_styles.items():
            class_name = ELEMENT_TO_CLASS[element]
            entry = self.entry(class_name)
            if not entry.selectors:
                entry.selectors.append(element)
            entry.base = merge_preserving(entry.base, decls)

    def apply_layout_defaults(self) -> None:
        for entry in self.classes.values():
            if not entry.is_layout_container or not entry.base:
                continue
            entry.base, added = apply_layout_defaults(entry.base)
            if added:
                self.collector.warn(
                    "layout_defaults",
                    f"Layout container .{entry.class_name} missing explicit properties: "
                    f"{', '.join(added)}. Injected browser defaults.",
                    selector=f".{entry.class_name}",
                )

    def build(self) -> ClassIndex:
        return ClassIndex(
            classes=self.classes,
            warnings=self.collector.warnings,
            non_standard_media_css="\n".join(self.non_standard),
            variables=self.variables.as_dict(),
        )


def build_class_index(css: str, config: ConverterConfig | None = None) -> ClassIndex:
    """Compile CSS text into a breakpoint-bucketed ``ClassIndex``.

    Never raises on malformed CSS; everything the compiler cannot model is
    reported through the index's warnings.
    """
    config = resolve_config(config)
    sheet = extract_rules(css)
    builder = _IndexBuilder(sheet.variables, config)

    # Base rules first so min-width blocks can backfill prior base values.
    for rule in sheet.rules:
        builder.add_base_rule(rule)
    for block in sheet.media:
        builder.add_media_block(block)
    for at_rule in sheet.at_rules:
        builder.add_at_rule(at_rule)

    builder.merge_element_styles()
    builder.apply_layout_defaults()

    index = builder.build()
    logger.debug(
        "Built class index: %d classes, %d warnings, %d non-standard blocks",
        len(index),
        len(index.warnings),
        len(builder.non_standard),
    )
    return index
