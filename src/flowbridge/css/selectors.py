"""Selector classification: map a CSS selector to the target class it styles."""

from __future__ import annotations

import re
from dataclasses import dataclass

from flowbridge.model.declarations import split_top_level

__all__ = [
    "ELEMENT_TO_CLASS",
    "PSEUDO_BUCKETS",
    "STRUCTURAL_ELEMENTS",
    "SelectorTarget",
    "parse_selector",
    "split_selector_list",
]


# ---------------------------------------------------------------------------
# Fixed tables
# ---------------------------------------------------------------------------

ELEMENT_TO_CLASS: dict[str, str] = {
    # Typography elements
    "body": "wf-body",
    "h1": "heading-h1",
    "h2": "heading-h2",
    "h3": "heading-h3",
    "h4": "heading-h4",
    "h5": "heading-h5",
    "h6": "heading-h6",
    "p": "text-body",
    "a": "link",
    # Structural elements
    "section": "wf-section",
    "nav": "wf-nav",
    "header": "wf-header",
    "footer": "wf-footer",
    "main": "wf-main",
    "article": "wf-article",
    "aside": "wf-aside",
}

STRUCTURAL_ELEMENTS = frozenset({
    "section", "nav", "header", "footer", "main", "article", "aside",
})

PSEUDO_BUCKETS: dict[str, str] = {
    "hover": "hover",
    "focus": "focus",
    "focus-visible": "focus",
    "active": "active",
    "visited": "visited",
}

_CLASS_RE = re.compile(r"\.([a-zA-Z_-][\w-]*)")
_TRAILING_PSEUDO_RE = re.compile(r"::?(\w+(?:-\w+)*)(?:\([^)]*\))?\s*$")
_COMBO_RE = re.compile(r"\.[a-zA-Z_-][\w-]*\.[a-zA-Z_-][\w-]*")
_DESCENDANT_RE = re.compile(r"\.[a-zA-Z_-][\w-]*[\s>]+")
_COMBINATOR_RE = re.compile(r"\s*[\s>+~]\s*")


@dataclass(frozen=True)
class SelectorTarget:
    """Classification of a single (non-list) selector.

    Attributes:
        selector: The source selector text.
        class_name: Target class, or None when the selector styles no class.
        pseudo: Trailing pseudo-class or pseudo-element name, if any.
        is_combo: ``.a.b`` compound without a combinator.
        combo_parent: For a combo, the class the target is stacked on.
        parent_classes: Classes preceding the target in a descendant chain.
        is_descendant: Whether a descendant/child combinator follows a class.
        element: The bare element name when mapped from the element table.
        unsupported: Reason the selector cannot be represented, if any.
    """

    selector: str
    class_name: str | None
    pseudo: str | None = None
    is_combo: bool = False
    combo_parent: str | None = None
    parent_classes: tuple[str, ...] = ()
    is_descendant: bool = False
    element: str | None = None
    unsupported: str | None = None

    @property
    def pseudo_bucket(self) -> str | None:
        if self.pseudo is None:
            return None
        return PSEUDO_BUCKETS.get(self.pseudo)

    @property
    def is_element(self) -> bool:
        return self.element is not None


def split_selector_list(text: str) -> list[str]:
    """Split a comma-separated selector list (commas inside parens are kept)."""
    return split_top_level(text, ",")


def _last_compound(selector: str) -> str:
    parts = [p for p in _COMBINATOR_RE.split(selector.strip()) if p]
    return parts[-1] if parts else ""


def parse_selector(selector: str) -> SelectorTarget:
    """Classify *selector*.

    The last class in a compound or descendant chain is the target. Bare
    element selectors from ``ELEMENT_TO_CLASS`` map to their reserved class.
    """
    selector = selector.strip()
    element = selector.lower()
    if element in ELEMENT_TO_CLASS:
        return SelectorTarget(selector=selector, class_name=ELEMENT_TO_CLASS[element], element=element)

    classes = _CLASS_RE.findall(selector)
    if not classes:
        return SelectorTarget(selector=selector, class_name=None)

    pseudo_match = _TRAILING_PSEUDO_RE.search(selector)
    pseudo = pseudo_match.group(1).lower() if pseudo_match else None
    core = selector[:pseudo_match.start()] if pseudo_match else selector

    unsupported = None
    if ":" in core or "[" in core:
        unsupported = "pseudo-class or attribute inside selector"
    elif not _CLASS_RE.search(_last_compound(core)):
        unsupported = "rightmost compound has no class"

    is_combo = bool(_COMBO_RE.search(core))
    is_descendant = bool(_DESCENDANT_RE.search(core))
    core_classes = _CLASS_RE.findall(core) or classes

    combo_parent = None
    if is_combo and not is_descendant and len(core_classes) >= 2:
        combo_parent = core_classes[-2]

    parent_classes: tuple[str, ...] = ()
    if is_descendant and len(core_classes) > 1:
        parent_classes = tuple(core_classes[:-1])

    return SelectorTarget(
        selector=selector,
        class_name=core_classes[-1],
        pseudo=pseudo,
        is_combo=is_combo,
        combo_parent=combo_parent,
        parent_classes=parent_classes,
        is_descendant=is_descendant,
        unsupported=unsupported,
    )
