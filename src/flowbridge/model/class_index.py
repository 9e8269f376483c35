"""Class index: the breakpoint-bucketed intermediate representation."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from flowbridge.model.declarations import Declarations, to_style_less
from flowbridge.model.diagnostic import ParseWarning, Severity


# ---------------------------------------------------------------------------
# Bucket vocabulary
# ---------------------------------------------------------------------------

PSEUDO_STATES = ("hover", "focus", "active", "visited")

# Cascade-down tiers (desktop-first overrides) then cascade-up tiers.
DOWN_TIERS = ("desktop", "medium", "small", "tiny")
UP_TIERS = ("xlarge", "xxlarge", "xxxlarge")
BREAKPOINT_TIERS = DOWN_TIERS + UP_TIERS

MEDIA_BREAKPOINT_LABELS: Mapping[str, str] = MappingProxyType({
    "desktop": "min-width: 992px",
    "medium": "max-width: 991px",
    "small": "max-width: 767px",
    "tiny": "max-width: 479px",
    "xlarge": "min-width: 1280px",
    "xxlarge": "min-width: 1440px",
    "xxxlarge": "min-width: 1920px",
})


@dataclass
class ClassIndexEntry:
    """Accumulated declarations for one target class name.

    Attributes:
        class_name: The target class.
        selectors: Source selectors that contributed to this entry.
        base: Desktop base declarations.
        pseudo: Declarations per pseudo-state (hover/focus/active/visited).
        breakpoints: Declarations per breakpoint tier.
        is_combo: Whether the class is applied as a combo class.
        combo_parent: The class this combo class is stacked on.
        parent_classes: Ancestor classes from descendant selectors.
        children: Classes that were recorded under this one.
        is_layout_container: Set when any rule declares display flex/grid.
    """

    class_name: str
    selectors: list[str] = field(default_factory=list)
    base: Declarations = field(default_factory=dict)
    pseudo: dict[str, Declarations] = field(default_factory=dict)
    breakpoints: dict[str, Declarations] = field(default_factory=dict)
    is_combo: bool = False
    combo_parent: str | None = None
    parent_classes: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)
    is_layout_container: bool = False

    def has_content(self) -> bool:
        if self.base:
            return True
        if any(self.pseudo.values()):
            return True
        return any(self.breakpoints.values())

    def add_child(self, class_name: str) -> None:
        if class_name not in self.children:
            self.children.append(class_name)

    def add_parent(self, class_name: str) -> None:
        if class_name not in self.parent_classes:
            self.parent_classes.append(class_name)

    @property
    def base_style_less(self) -> str:
        return to_style_less(self.base)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "className": self.class_name,
            "selectors": list(self.selectors),
            "baseStyles": to_style_less(self.base),
        }
        for state in PSEUDO_STATES:
            if self.pseudo.get(state):
                data[f"{state}Styles"] = to_style_less(self.pseudo[state])
        data["mediaQueries"] = {
            tier: to_style_less(self.breakpoints[tier])
            for tier in BREAKPOINT_TIERS
            if self.breakpoints.get(tier)
        }
        data["isComboClass"] = self.is_combo
        if self.combo_parent:
            data["parentClass"] = self.combo_parent
        data["parentClasses"] = list(self.parent_classes)
        data["children"] = list(self.children)
        data["isLayoutContainer"] = self.is_layout_container
        return data


@dataclass(frozen=True)
class ClassIndex:
    """Ordered mapping of class name to entry, plus compile metadata.

    Built once per conversion by the resolver and read-only afterwards.
    """

    classes: Mapping[str, ClassIndexEntry]
    warnings: tuple[ParseWarning, ...] = ()
    media_breakpoints: Mapping[str, str] = field(default_factory=lambda: MEDIA_BREAKPOINT_LABELS)
    non_standard_media_css: str = ""
    variables: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.classes, MappingProxyType):
            object.__setattr__(self, "classes", MappingProxyType(dict(self.classes)))
        if not isinstance(self.variables, MappingProxyType):
            object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    def get(self, class_name: str) -> ClassIndexEntry | None:
        return self.classes.get(class_name)

    def __contains__(self, class_name: object) -> bool:
        return class_name in self.classes

    def __len__(self) -> int:
        return len(self.classes)

    @property
    def class_names(self) -> list[str]:
        return list(self.classes)

    def styled_classes(self) -> list[str]:
        return [name for name, entry in self.classes.items() if entry.has_content()]

    def warnings_of(self, kind: str) -> list[ParseWarning]:
        return [w for w in self.warnings if w.kind == kind]

    @property
    def has_warnings(self) -> bool:
        return any(w.severity is Severity.WARNING for w in self.warnings)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "classes": {name: entry.to_dict() for name, entry in self.classes.items()},
            "mediaBreakpoints": dict(self.media_breakpoints),
            "warnings": [w.to_dict() for w in self.warnings],
        }
        if self.non_standard_media_css:
            data["nonStandardMediaCss"] = self.non_standard_media_css
        return data
