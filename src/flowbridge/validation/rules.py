"""Validation checks for emitted node/style graphs.

Each check is a function taking a ``PayloadView`` and the converter
config and returning a report dataclass whose ``issues`` feed the
preflight result.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from flowbridge.config import ConverterConfig
from flowbridge.model.declarations import split_top_level
from flowbridge.model.diagnostic import Severity, ValidationIssue
from flowbridge.model.payload import VARIANT_KEYS
from flowbridge.validation.graph import PayloadView, find_cycles, node_depths, reachable_from


# ---------------------------------------------------------------------------
# Known value sets
# ---------------------------------------------------------------------------

ALLOWED_VARIANT_KEYS = frozenset(VARIANT_KEYS) | frozenset({
    "focus-visible",
    "focus-within",
    "checked",
    "disabled",
    "placeholder",
    "selection",
})

RESERVED_CLASS_PREFIXES = ("w-",)

RESERVED_CLASS_NAMES = frozenset({
    "w-layout-grid", "w-layout-hflex", "w-layout-vflex", "w-layout-blockcontainer",
    "w-container", "w-row", "w-col", "w-clearfix",
    "w-button", "w-slider", "w-slide", "w-nav", "w-nav-menu", "w-nav-link",
    "w-dropdown", "w-dropdown-toggle", "w-dropdown-list", "w-dropdown-link",
    "w-tab-menu", "w-tab-link", "w-tab-content", "w-tab-pane",
    "w-form", "w-input", "w-select", "w-checkbox", "w-radio",
    "w-lightbox", "w-lightbox-content",
    "w-inline-block", "w-embed", "w-richtext", "w-video",
})

NODE_TYPES = frozenset({
    "Block", "Link", "Image", "Video", "HtmlEmbed", "Heading",
    "Paragraph", "Section", "List", "ListItem",
})

TAG_TYPES: dict[str, tuple[str, ...]] = {
    "h1": ("Heading", "Block"),
    "h2": ("Heading", "Block"),
    "h3": ("Heading", "Block"),
    "h4": ("Heading", "Block"),
    "h5": ("Heading", "Block"),
    "h6": ("Heading", "Block"),
    "p": ("Paragraph", "Block"),
    "a": ("Link", "Block"),
    "img": ("Image",),
    "video": ("Video",),
    "ul": ("List", "Block"),
    "ol": ("List", "Block"),
    "li": ("ListItem", "Block"),
    "section": ("Block",),
    "div": ("Block", "HtmlEmbed"),
    "nav": ("Block",),
    "header": ("Block",),
    "footer": ("Block",),
    "span": ("Block",),
}

ID_PATTERN = re.compile(r"^[\w-]+$")
_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
_EMPTY_URL_RE = re.compile(r"""url\(\s*['"]?\s*['"]?\s*\)""")
_NEGATIVE_CHECKED = frozenset({
    "width", "height", "padding",
    "padding-top", "padding-right", "padding-bottom", "padding-left",
})


def is_reserved_class(name: str) -> bool:
    return name in RESERVED_CLASS_NAMES or name.startswith(RESERVED_CLASS_PREFIXES)


def reserved_replacement(name: str) -> str:
    """Non-reserved name for a reserved class: 'w-nav' becomes 'custom-nav'."""
    return "custom-" + name.removeprefix("w-")


def _issues(*groups: list[ValidationIssue]) -> tuple[ValidationIssue, ...]:
    return tuple(issue for group in groups for issue in group)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UuidReport:
    duplicate_node_ids: tuple[str, ...] = ()
    duplicate_style_ids: tuple[str, ...] = ()
    invalid_ids: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "duplicates": list(self.duplicate_node_ids + self.duplicate_style_ids),
            "duplicateNodeIds": list(self.duplicate_node_ids),
            "duplicateStyleIds": list(self.duplicate_style_ids),
            "invalidFormat": list(self.invalid_ids),
        }


@dataclass(frozen=True)
class ReferenceReport:
    orphans: tuple[tuple[str, str], ...] = ()
    unreachable: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.orphans

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "orphanReferences": [{"parentId": p, "missingChildId": c} for p, c in self.orphans],
            "unreachableNodes": list(self.unreachable),
        }


@dataclass(frozen=True)
class CircularReport:
    cycles: tuple[tuple[str, ...], ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.cycles

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "cycles": [list(c) for c in self.cycles]}


@dataclass(frozen=True)
class InvalidDeclaration:
    """One flagged declaration inside a style's ``styleLess``."""

    class_name: str
    property: str
    value: str
    reason: str
    variant: str | None = None

    def __str__(self) -> str:
        where = f"{self.class_name}[{self.variant}]" if self.variant else self.class_name
        return f"{where}: {self.property} = {self.value} ({self.reason})"

    def to_dict(self) -> dict[str, Any]:
        data = {
            "className": self.class_name,
            "property": self.property,
            "value": self.value,
            "reason": self.reason,
        }
        if self.variant:
            data["variant"] = self.variant
        return data


@dataclass(frozen=True)
class StyleReport:
    invalid_styles: tuple[InvalidDeclaration, ...] = ()
    missing_refs: tuple[str, ...] = ()
    invalid_variant_keys: tuple[str, ...] = ()
    reserved_names: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.invalid_styles

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "invalidStyles": [d.to_dict() for d in self.invalid_styles],
            "missingStyleRefs": list(self.missing_refs),
            "invalidVariantKeys": list(self.invalid_variant_keys),
            "reservedClassNames": list(self.reserved_names),
        }


@dataclass(frozen=True)
class EmbedReport:
    total_bytes: int = 0
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "totalSize": self.total_bytes,
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class DepthReport:
    max_depth: int = 0
    deep_nodes: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.deep_nodes

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "maxDepth": self.max_depth, "deepNodes": list(self.deep_nodes)}


@dataclass(frozen=True)
class NodeStructureReport:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}


# ---------------------------------------------------------------------------
# Identity checks (FATAL / ERROR)
# ---------------------------------------------------------------------------


def _duplicates(ids: list[str]) -> list[str]:
    counts = Counter(ids)
    return [i for i in counts if counts[i] > 1]


def check_uuids(view: PayloadView, config: ConverterConfig) -> UuidReport:
    """Identifiers must be unique among nodes and among styles, and well formed."""
    dup_nodes = _duplicates(view.node_ids)
    dup_styles = _duplicates(view.style_ids)
    invalid = [i for i in dict.fromkeys(view.node_ids + view.style_ids) if not ID_PATTERN.match(i)]

    fatal = [
        ValidationIssue(
            Severity.FATAL,
            "DUPLICATE_UUID",
            f"Duplicate {kind} id '{i}'.",
            context=i,
            suggestion="Regenerate identifiers so each is unique.",
        )
        for kind, ids in (("node", dup_nodes), ("style", dup_styles))
        for i in ids
    ]
    errors = [
        ValidationIssue(
            Severity.ERROR,
            "INVALID_UUID_FORMAT",
            f"Identifier {i!r} is empty or contains characters other than letters, digits, '-' and '_'.",
            context=i or None,
        )
        for i in invalid
    ]
    return UuidReport(tuple(dup_nodes), tuple(dup_styles), tuple(invalid), _issues(fatal, errors))


def check_circular_references(view: PayloadView, config: ConverterConfig) -> CircularReport:
    """The ``children`` graph must be acyclic; every cycle is reported."""
    cycles = find_cycles(view.children)
    issues = [
        ValidationIssue(
            Severity.FATAL,
            "CIRCULAR_REFERENCE",
            "Circular reference: " + " -> ".join(cycle),
            context=cycle[0],
            suggestion="Remove the child reference that points back to an ancestor.",
        )
        for cycle in cycles
    ]
    return CircularReport(tuple(tuple(c) for c in cycles), tuple(issues))


def check_references(view: PayloadView, config: ConverterConfig) -> ReferenceReport:
    """Child references must resolve; nodes should be reachable from a root."""
    orphans: list[tuple[str, str]] = []
    for node in view.nodes:
        parent = node.get("_id") if isinstance(node.get("_id"), str) else ""
        kids = node.get("children")
        for child in kids if isinstance(kids, list) else []:
            if not isinstance(child, str) or child not in view.children:
                orphans.append((parent, str(child)))

    orphans = list(dict.fromkeys(orphans))
    reachable = reachable_from(view.children, view.roots())
    unreachable = [nid for nid in view.children if nid not in reachable]

    errors = [
        ValidationIssue(
            Severity.ERROR,
            "ORPHAN_REFERENCE",
            f"Node '{parent}' references missing child '{child}'.",
            context=parent,
            suggestion="Remove the dangling child id or add the missing node.",
        )
        for parent, child in orphans
    ]
    warnings = [
        ValidationIssue(
            Severity.WARNING,
            "UNREACHABLE_NODE",
            f"Node '{nid}' is not reachable from any root node.",
            context=nid,
        )
        for nid in unreachable
    ]
    return ReferenceReport(tuple(orphans), tuple(unreachable), _issues(errors, warnings))


def check_depth(view: PayloadView, config: ConverterConfig) -> DepthReport:
    """Nesting deeper than ``max_node_depth`` is fatal."""
    depths = node_depths(view.children, view.roots())
    max_depth = max(depths.values(), default=0)
    deep = [nid for nid, depth in depths.items() if depth > config.max_node_depth]
    issues = []
    if deep:
        issues.append(
            ValidationIssue(
                Severity.FATAL,
                "EXCESSIVE_DEPTH",
                f"{len(deep)} node(s) nested deeper than {config.max_node_depth} levels "
                f"(max depth {max_depth}).",
                context=deep[0],
                suggestion="Flatten wrapper elements.",
            )
        )
    return DepthReport(max_depth, tuple(deep), tuple(issues))


# ---------------------------------------------------------------------------
# Style checks (ERROR / WARNING)
# ---------------------------------------------------------------------------


def scan_style_less(style_less: str) -> list[tuple[str, str, str]]:
    """Return ``(property, value, reason)`` for each problematic declaration."""
    problems: list[tuple[str, str, str]] = []
    for piece in split_top_level(style_less or "", ";"):
        prop, sep, value = piece.partition(":")
        prop, value = prop.strip(), value.strip()
        if not sep or not prop or not value:
            problems.append((prop or "?", value or "?", "Malformed declaration"))
            continue
        if "undefined" in value or "NaN" in value:
            problems.append((prop, value, "Contains undefined/NaN"))
        if "{{" in value or "}}" in value:
            problems.append((prop, value, "Contains unresolved template variables"))
        if "var(--" in value:
            problems.append((prop, value, "Contains unresolved CSS variable"))
        if "!important" in value:
            problems.append((prop, value, "Contains !important (not supported)"))
        if _EMPTY_URL_RE.search(value):
            problems.append((prop, value, "Empty url() value"))
        if ("color" in prop or "background" in prop) and value.startswith("#") and not _HEX_RE.match(value):
            problems.append((prop, value, "Invalid hex color format"))
        if prop in _NEGATIVE_CHECKED and value.startswith("-"):
            problems.append((prop, value, "Negative dimension value"))
    return problems


def check_styles(view: PayloadView, config: ConverterConfig) -> StyleReport:
    """Style content, variant keys, reserved names and node class references."""
    invalid: list[InvalidDeclaration] = []
    bad_keys: list[tuple[str, str]] = []
    reserved: list[str] = []

    for style in view.styles:
        name = str(style.get("name", ""))
        for prop, value, reason in scan_style_less(str(style.get("styleLess") or "")):
            invalid.append(InvalidDeclaration(name, prop, value, reason))
        variants = style.get("variants")
        if isinstance(variants, Mapping):
            for key, variant in variants.items():
                if key not in ALLOWED_VARIANT_KEYS:
                    bad_keys.append((name, str(key)))
                    continue
                text = variant.get("styleLess") if isinstance(variant, Mapping) else ""
                for prop, value, reason in scan_style_less(str(text or "")):
                    invalid.append(InvalidDeclaration(name, prop, value, reason, variant=key))
        if name and is_reserved_class(name):
            reserved.append(name)

    known = set(view.style_ids) | {str(s.get("name", "")) for s in view.styles}
    missing: list[str] = []
    for node in view.nodes:
        if node.get("text") is True:
            continue
        for ref in view.classes_of(node):
            if ref not in known and not is_reserved_class(ref):
                missing.append(f"{node.get('_id')} -> {ref}")

    issues = [
        ValidationIssue(Severity.WARNING, "INVALID_STYLE", str(d), context=d.class_name)
        for d in invalid
    ]
    issues += [
        ValidationIssue(
            Severity.ERROR,
            "INVALID_VARIANT_KEY",
            f"Style variant key '{key}' on '{name}' is not a known breakpoint or state.",
            context=name,
            suggestion="Use one of: " + ", ".join(VARIANT_KEYS),
        )
        for name, key in bad_keys
    ]
    issues += [
        ValidationIssue(
            Severity.ERROR,
            "RESERVED_CLASS_NAME",
            f"Style '{name}' uses a reserved Webflow class name.",
            context=name,
            suggestion=f"Rename to '{reserved_replacement(name)}'.",
        )
        for name in reserved
    ]
    issues += [
        ValidationIssue(Severity.WARNING, "MISSING_STYLE_REF", f"Class reference {ref} has no matching style.")
        for ref in missing
    ]
    return StyleReport(
        invalid_styles=tuple(invalid),
        missing_refs=tuple(missing),
        invalid_variant_keys=tuple(f"{name}:{key}" for name, key in bad_keys),
        reserved_names=tuple(reserved),
        issues=tuple(issues),
    )


# ---------------------------------------------------------------------------
# Embed size and node structure
# ---------------------------------------------------------------------------


def _dig(obj: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(obj, Mapping):
            return None
        obj = obj.get(key)
    return obj


def embed_content(node: Mapping[str, Any]) -> str:
    html = _dig(node, "data", "embed", "meta", "html")
    if isinstance(html, str):
        return html
    v = node.get("v")
    return v if isinstance(v, str) else ""


def _kb(size: int) -> str:
    return f"{size / 1024:.1f}KB"


def check_embed_size(
    view: PayloadView,
    config: ConverterConfig,
    extra_css: str = "",
    extra_js: str = "",
) -> EmbedReport:
    """Embedded content is measured in UTF-8 bytes, per node and in total."""
    warnings: list[str] = []
    errors: list[str] = []
    total = len(extra_css.encode("utf-8")) + len(extra_js.encode("utf-8"))

    for node in view.nodes:
        if node.get("type") != "HtmlEmbed":
            continue
        size = len(embed_content(node).encode("utf-8"))
        total += size
        if size > config.embed_error_bytes:
            errors.append(f"HtmlEmbed node {node.get('_id')} exceeds {_kb(config.embed_error_bytes)} ({_kb(size)})")
        elif size > config.embed_warn_bytes:
            warnings.append(f"HtmlEmbed node {node.get('_id')} is large ({_kb(size)})")

    if total > config.embed_error_bytes:
        errors.append(f"Total embed content exceeds {_kb(config.embed_error_bytes)} ({_kb(total)})")
    elif total > config.embed_warn_bytes:
        warnings.append(f"Total embed content is large ({_kb(total)})")

    issues = [ValidationIssue(Severity.ERROR, "EMBED_SIZE_EXCEEDED", e) for e in errors]
    issues += [ValidationIssue(Severity.WARNING, "EMBED_SIZE_LARGE", w) for w in warnings]
    return EmbedReport(total, tuple(warnings), tuple(errors), tuple(issues))


def check_node_structure(view: PayloadView, config: ConverterConfig) -> NodeStructureReport:
    """Text nodes are leaves with a value; node types agree with their tags."""
    errors: list[str] = []
    warnings: list[str] = []

    for node in view.nodes:
        nid = node.get("_id")
        kids = node.get("children")
        if node.get("text") is True:
            if not isinstance(node.get("v"), str):
                errors.append(f'Text node {nid} missing "v" property')
            if isinstance(kids, list) and kids:
                errors.append(f"Text node {nid} has children (text nodes must be leaf nodes)")
            continue

        node_type = node.get("type")
        tag = node.get("tag")
        if node_type is not None and not isinstance(node_type, str):
            errors.append(f"Node {nid} has non-string type: {node_type!r}")
            node_type = None
        if tag is not None and not isinstance(tag, str):
            errors.append(f"Node {nid} has non-string tag: {tag!r}")
            tag = None
        if node_type and node_type not in NODE_TYPES:
            errors.append(f"Node {nid} has invalid type: {node_type}")
        if tag and node_type:
            allowed = TAG_TYPES.get(tag.lower())
            if allowed and node_type not in allowed:
                if tag.lower() == "section" and node_type == "Section":
                    errors.append(f'Node {nid}: tag="section" should use type="Block", not type="Section"')
                else:
                    warnings.append(f'Node {nid}: tag="{tag}" with type="{node_type}" may cause issues')

        if node_type == "Block" and not tag:
            warnings.append(f"Block node {nid} missing tag attribute")
        elif node_type == "Image" and not _dig(node, "data", "attr", "src"):
            warnings.append(f"Image node {nid} missing src attribute")
        elif node_type == "Link" and not _dig(node, "data", "link", "url"):
            warnings.append(f"Link node {nid} missing url")
        elif node_type == "HtmlEmbed" and not embed_content(node):
            warnings.append(f"HtmlEmbed node {nid} missing embed content")

    issues = [ValidationIssue(Severity.ERROR, "NODE_STRUCTURE_ERROR", e) for e in errors]
    issues += [ValidationIssue(Severity.WARNING, "NODE_STRUCTURE_WARNING", w) for w in warnings]
    return NodeStructureReport(tuple(errors), tuple(warnings), tuple(issues))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

CheckFunc = Callable[[PayloadView, ConverterConfig], Any]

# Ordered as the preflight reports them.
ALL_CHECKS: tuple[tuple[str, CheckFunc], ...] = (
    ("uuid", check_uuids),
    ("circular", check_circular_references),
    ("references", check_references),
    ("depth", check_depth),
    ("styles", check_styles),
    ("embed_size", check_embed_size),
    ("node_structure", check_node_structure),
)
