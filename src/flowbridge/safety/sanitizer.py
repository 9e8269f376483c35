"""Default payload sanitizer.

Repairs the issues the preflight validator flags as blocking, on a deep
copy of the payload. Each step appends human-readable lines to the
change log and leaves anything it cannot repair for re-validation.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from flowbridge.emit.ids import IdRegistry
from flowbridge.validation.graph import PayloadView
from flowbridge.validation.rules import (
    ALLOWED_VARIANT_KEYS,
    ID_PATTERN,
    is_reserved_class,
    reserved_replacement,
)

__all__ = ["SANITIZE_STEPS", "SanitizeReport", "sanitize_payload"]

logger = logging.getLogger(__name__)

Node = dict[str, Any]


@dataclass
class SanitizeReport:
    """Sanitized payload copy and the list of changes made to it."""

    payload: dict[str, Any]
    changes: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def _children(node: Node) -> list[str]:
    kids = node.get("children")
    return [c for c in kids if isinstance(c, str)] if isinstance(kids, list) else []


def _remap_references(nodes: list[Node], attr: str, mapping: dict[str, str]) -> None:
    if not mapping:
        return
    for node in nodes:
        refs = node.get(attr)
        if isinstance(refs, list):
            node[attr] = [mapping.get(r, r) if isinstance(r, str) else r for r in refs]


# ---------------------------------------------------------------------------
# Identifier repairs
# ---------------------------------------------------------------------------


def _all_ids(nodes: list[Node], styles: list[Node]) -> set[str]:
    return {item["_id"] for item in nodes + styles if isinstance(item.get("_id"), str)}


def fix_duplicate_ids(nodes: list[Node], styles: list[Node], registry: IdRegistry) -> list[str]:
    """Give every repeated node/style id a fresh one.

    References to a duplicated id are remapped to the regenerated one.
    """
    changes: list[str] = []
    taken = _all_ids(nodes, styles)
    for kind, items, attr in (("node", nodes, "children"), ("style", styles, "classes")):
        seen: set[str] = set()
        mapping: dict[str, str] = {}
        for item in items:
            old = item.get("_id")
            if not isinstance(old, str):
                continue
            if old not in seen:
                seen.add(old)
                continue
            new = registry.fresh(kind, taken)
            taken.add(new)
            item["_id"] = new
            mapping[old] = new
            changes.append(f"Regenerated duplicate {kind} ID: {old} -> {new}")
        _remap_references(nodes, attr, mapping)
    return changes


def fix_invalid_ids(nodes: list[Node], styles: list[Node], registry: IdRegistry) -> list[str]:
    """Replace ids that are missing, empty or contain unsupported characters."""
    changes: list[str] = []
    taken = _all_ids(nodes, styles)
    for kind, items, attr in (("node", nodes, "children"), ("style", styles, "classes")):
        mapping: dict[str, str] = {}
        for item in items:
            old = item.get("_id")
            if isinstance(old, str) and ID_PATTERN.match(old):
                continue
            new = registry.fresh(kind, taken)
            taken.add(new)
            item["_id"] = new
            if isinstance(old, str) and old:
                mapping.setdefault(old, new)
            changes.append(f"Replaced invalid {kind} ID: {old!r} -> {new}")
        _remap_references(nodes, attr, mapping)
    return changes


# ---------------------------------------------------------------------------
# Graph repairs
# ---------------------------------------------------------------------------


def break_circular_references(nodes: list[Node]) -> list[str]:
    """Drop every child edge that points back to an ancestor.

    Walks from the roots first, then from any node left unvisited, so
    the edge closing each cycle is the one removed.
    """
    by_id: dict[str, Node] = {}
    for node in nodes:
        nid = node.get("_id")
        if isinstance(nid, str):
            by_id.setdefault(nid, node)
    claimed = {child for node in nodes for child in _children(node)}
    starts = [nid for nid in by_id if nid not in claimed] + list(by_id)

    changes: list[str] = []
    done: set[str] = set()
    for start in starts:
        if start in done:
            continue
        on_path = {start}
        stack = [(start, _children(by_id[start]), iter(_children(by_id[start])), [])]
        while stack:
            nid, original, pending, kept = stack[-1]
            for child in pending:
                if child in on_path:
                    changes.append(f"Broke circular node reference: {nid} -> {child}")
                    continue
                kept.append(child)
                if child in by_id and child not in done:
                    on_path.add(child)
                    kids = _children(by_id[child])
                    stack.append((child, kids, iter(kids), []))
                    break
            else:
                stack.pop()
                if len(kept) != len(original):
                    by_id[nid]["children"] = kept
                on_path.discard(nid)
                done.add(nid)
    return changes


def remove_orphan_children(nodes: list[Node]) -> list[str]:
    changes: list[str] = []
    known = {node["_id"] for node in nodes if isinstance(node.get("_id"), str)}
    for node in nodes:
        kids = node.get("children")
        if not isinstance(kids, list):
            continue
        kept = [c for c in kids if isinstance(c, str) and c in known]
        if len(kept) != len(kids):
            for child in kids:
                if child not in kept:
                    changes.append(f"Removed orphan child reference: {node.get('_id')} -> {child}")
            node["children"] = kept
    return changes


def fix_text_nodes(nodes: list[Node]) -> list[str]:
    """Text nodes are leaves carrying a string value."""
    changes: list[str] = []
    for node in nodes:
        if node.get("text") is not True:
            continue
        if node.get("children"):
            changes.append(f"Removed {len(node['children'])} child reference(s) from text node {node.get('_id')}")
            node["children"] = []
        if not isinstance(node.get("v"), str):
            node["v"] = ""
            changes.append(f"Added empty value to text node {node.get('_id')}")
    return changes


# ---------------------------------------------------------------------------
# Style repairs
# ---------------------------------------------------------------------------


def remove_invalid_variants(styles: list[Node]) -> list[str]:
    changes: list[str] = []
    for style in styles:
        variants = style.get("variants")
        if not isinstance(variants, dict):
            continue
        bad = [key for key in variants if key not in ALLOWED_VARIANT_KEYS]
        for key in bad:
            del variants[key]
            changes.append(f'Removed invalid variant "{key}" from style "{style.get("name")}"')
    return changes


def rename_reserved_styles(styles: list[Node]) -> list[str]:
    """Rename reserved class names and update class-name references between styles."""
    changes: list[str] = []
    names = {s["name"] for s in styles if isinstance(s.get("name"), str)}
    mapping: dict[str, str] = {}
    for style in styles:
        name = style.get("name")
        if not isinstance(name, str) or not is_reserved_class(name):
            continue
        new = mapping.get(name) or reserved_replacement(name)
        n = 2
        while new in names and name not in mapping:
            new = f"{reserved_replacement(name)}-{n}"
            n += 1
        names.add(new)
        mapping[name] = new
        style["name"] = new
        changes.append(f"Renamed reserved class: {name} -> {new}")
    _remap_references(styles, "children", mapping)
    return changes


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

SanitizeStep = Callable[[list[Node], list[Node], IdRegistry], list[str]]

# Applied in order; later steps see the output of earlier ones.
SANITIZE_STEPS: tuple[tuple[str, SanitizeStep], ...] = (
    ("duplicate_ids", fix_duplicate_ids),
    ("invalid_ids", fix_invalid_ids),
    ("circular", lambda nodes, styles, registry: break_circular_references(nodes)),
    ("orphans", lambda nodes, styles, registry: remove_orphan_children(nodes)),
    ("text_nodes", lambda nodes, styles, registry: fix_text_nodes(nodes)),
    ("variants", lambda nodes, styles, registry: remove_invalid_variants(styles)),
    ("reserved_names", lambda nodes, styles, registry: rename_reserved_styles(styles)),
)


def sanitize_payload(payload: Any, registry: IdRegistry | None = None) -> SanitizeReport:
    """Repair a deep copy of *payload* and report what changed.

    Accepts the clipboard envelope or its inner ``payload`` object and
    returns the same shape. Raises ``PayloadShapeError`` when the input
    is not a payload at all.
    """
    PayloadView.from_payload(payload)
    result = copy.deepcopy(payload)
    inner = result.get("payload", result)
    nodes: list[Node] = inner["nodes"]
    styles: list[Node] = inner.setdefault("styles", [])
    if registry is None:
        registry = IdRegistry(prefix="fb-fix")

    changes: list[str] = []
    for name, step in SANITIZE_STEPS:
        step_changes = step(nodes, styles, registry)
        if step_changes:
            logger.debug("Sanitizer step %s made %d change(s)", name, len(step_changes))
        changes.extend(step_changes)

    for change in changes:
        logger.info("Sanitized: %s", change)
    return SanitizeReport(payload=result, changes=changes)
