"""Graph view of a payload and the traversals the checks run over it.

All traversals use explicit stacks or queues, so arbitrarily deep or
adversarial graphs never hit the interpreter's recursion limit.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


class PayloadShapeError(ValueError):
    """Raised by ``PayloadView.from_payload`` for structurally invalid input."""


def _node_id(node: Mapping[str, Any]) -> str:
    value = node.get("_id")
    return value if isinstance(value, str) else ""


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


@dataclass(frozen=True)
class PayloadView:
    """Read-only access to the node and style lists of a payload.

    ``children`` maps each node id to its child ids, keeping the first
    node when ids are duplicated.
    """

    nodes: tuple[Mapping[str, Any], ...]
    styles: tuple[Mapping[str, Any], ...]
    children: Mapping[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> PayloadView:
        """Build a view from the clipboard envelope or its inner ``payload``."""
        if not isinstance(payload, Mapping):
            raise PayloadShapeError(f"payload must be an object, got {type(payload).__name__}")
        inner = payload.get("payload", payload)
        if not isinstance(inner, Mapping):
            raise PayloadShapeError("'payload' must be an object")
        nodes = inner.get("nodes")
        styles = inner.get("styles", [])
        if not isinstance(nodes, list):
            raise PayloadShapeError("payload.nodes must be an array")
        if not isinstance(styles, list):
            raise PayloadShapeError("payload.styles must be an array")
        for kind, items in (("nodes", nodes), ("styles", styles)):
            for i, item in enumerate(items):
                if not isinstance(item, Mapping):
                    raise PayloadShapeError(f"payload.{kind}[{i}] must be an object")

        children: dict[str, list[str]] = {}
        for node in nodes:
            children.setdefault(_node_id(node), _string_list(node.get("children")))
        return cls(nodes=tuple(nodes), styles=tuple(styles), children=children)

    @property
    def node_ids(self) -> list[str]:
        return [_node_id(n) for n in self.nodes]

    @property
    def style_ids(self) -> list[str]:
        return [_node_id(s) for s in self.styles]

    def classes_of(self, node: Mapping[str, Any]) -> list[str]:
        return _string_list(node.get("classes"))

    def roots(self) -> list[str]:
        """Nodes nobody lists as a child, in document order."""
        claimed = {child for kids in self.children.values() for child in kids}
        return [nid for nid in self.children if nid not in claimed]


def find_cycles(children: Mapping[str, Iterable[str]], order: Iterable[str] | None = None) -> list[list[str]]:
    """Enumerate every back-edge of a depth-first traversal as a cycle path.

    Each cycle is reported as ``[start, ..., start]`` in traversal order.
    Child ids with no node entry are ignored.
    """
    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_path: set[str] = set()
    path: list[str] = []

    for start in order if order is not None else children:
        if start in visited or start not in children:
            continue
        visited.add(start)
        on_path.add(start)
        path.append(start)
        stack = [(start, iter(children[start]))]
        while stack:
            node, pending = stack[-1]
            for child in pending:
                if child not in children:
                    continue
                if child not in visited:
                    visited.add(child)
                    on_path.add(child)
                    path.append(child)
                    stack.append((child, iter(children[child])))
                    break
                if child in on_path:
                    cycles.append(path[path.index(child):] + [child])
            else:
                stack.pop()
                on_path.discard(node)
                path.pop()
    return cycles


def reachable_from(children: Mapping[str, Iterable[str]], roots: Iterable[str]) -> set[str]:
    seen: set[str] = set()
    queue = deque(r for r in roots if r in children)
    while queue:
        nid = queue.popleft()
        if nid in seen:
            continue
        seen.add(nid)
        queue.extend(c for c in children[nid] if c in children and c not in seen)
    return seen


def node_depths(children: Mapping[str, Iterable[str]], roots: Iterable[str]) -> dict[str, int]:
    """Depth of every node reachable from *roots*, roots at depth 1.

    Each node is visited once (shortest depth wins), which keeps cyclic
    graphs finite.
    """
    depths: dict[str, int] = {}
    queue = deque((r, 1) for r in roots if r in children)
    while queue:
        nid, depth = queue.popleft()
        if nid in depths:
            continue
        depths[nid] = depth
        for child in children[nid]:
            if child in children and child not in depths:
                queue.append((child, depth + 1))
    return depths
