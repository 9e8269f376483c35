"""Deterministic identifier assignment."""

from __future__ import annotations


class IdRegistry:
    """Hands out ``<prefix>-<kind>-<nnn>`` identifiers.

    ``id_for(kind, key)`` is memoized: the same key always receives the
    same identifier within one registry, and distinct keys never share
    one. ``fresh(kind)`` returns an unmemoized identifier from the same
    counter, so it never collides with memoized ones either.
    """

    def __init__(self, prefix: str = "fb") -> None:
        self.prefix = prefix
        self._ids: dict[tuple[str, str], str] = {}
        self._counters: dict[str, int] = {}

    def _next(self, kind: str) -> str:
        n = self._counters.get(kind, 0) + 1
        self._counters[kind] = n
        return f"{self.prefix}-{kind}-{n:03d}"

    def id_for(self, kind: str, key: str) -> str:
        existing = self._ids.get((kind, key))
        if existing is not None:
            return existing
        new_id = self._next(kind)
        self._ids[(kind, key)] = new_id
        return new_id

    def style_id(self, class_name: str) -> str:
        return self.id_for("style", class_name)

    def node_id(self, key: str) -> str:
        return self.id_for("node", key)

    def fresh(self, kind: str, taken: set[str] | frozenset[str] = frozenset()) -> str:
        """Return a never-issued identifier that is also not in *taken*."""
        candidate = self._next(kind)
        while candidate in taken:
            candidate = self._next(kind)
        return candidate

    def issued(self) -> dict[tuple[str, str], str]:
        return dict(self._ids)

    def __contains__(self, key: object) -> bool:
        return key in self._ids

    def __len__(self) -> int:
        return len(self._ids)
