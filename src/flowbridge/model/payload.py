"""Target graph model: style and element nodes plus the clipboard envelope."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from flowbridge.model.declarations import Declarations, to_style_less

PAYLOAD_TYPE = "@webflow/XscpData"

# External variant vocabulary, in emission order.
PSEUDO_VARIANT_KEYS = ("hover", "focus", "active", "visited")
BREAKPOINT_VARIANT_KEYS = ("main", "medium", "small", "tiny", "xl", "xxl")
VARIANT_KEYS = PSEUDO_VARIANT_KEYS + BREAKPOINT_VARIANT_KEYS


@dataclass
class WebflowStyle:
    """A class style in the target format."""

    id: str
    name: str
    base: Declarations = field(default_factory=dict)
    variants: dict[str, Declarations] = field(default_factory=dict)
    children: list[str] = field(default_factory=list)
    is_combo: bool = False
    namespace: str = ""

    @property
    def style_less(self) -> str:
        return to_style_less(self.base)

    def to_dict(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "fake": False,
            "type": "class",
            "name": self.name,
            "namespace": self.namespace,
            "comb": "&" if self.is_combo else "",
            "styleLess": to_style_less(self.base),
            "variants": {
                key: {"styleLess": to_style_less(decls)}
                for key, decls in self.variants.items()
            },
            "children": list(self.children),
        }


@dataclass
class WebflowNode:
    """An element node in the target format.

    ``classes`` holds style identifiers, ``children`` holds node identifiers.
    """

    id: str
    type: str
    tag: str | None = None
    classes: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)
    text: bool = False
    v: str | None = None
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        node: dict[str, Any] = {"_id": self.id, "type": self.type}
        if self.tag is not None:
            node["tag"] = self.tag
        if self.text:
            node["text"] = True
            node["v"] = self.v if self.v is not None else ""
        node["classes"] = list(self.classes)
        node["children"] = list(self.children)
        if self.data is not None:
            node["data"] = self.data
        return node


def _as_dict(item: WebflowStyle | WebflowNode | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(item, (WebflowStyle, WebflowNode)):
        return item.to_dict()
    return dict(item)


def build_payload(
    styles: Iterable[WebflowStyle | Mapping[str, Any]] = (),
    nodes: Iterable[WebflowNode | Mapping[str, Any]] = (),
) -> dict[str, Any]:
    """Wrap styles and nodes in the clipboard envelope."""
    return {
        "type": PAYLOAD_TYPE,
        "payload": {
            "nodes": [_as_dict(n) for n in nodes],
            "styles": [_as_dict(s) for s in styles],
            "assets": [],
            "ix1": [],
            "ix2": {"interactions": [], "events": [], "actionLists": []},
        },
        "meta": {
            "unlinkedSymbolCount": 0,
            "droppedLinks": 0,
            "dynBindRemovedCount": 0,
            "dynListBindRemovedCount": 0,
            "paginationRemovedCount": 0,
        },
    }
