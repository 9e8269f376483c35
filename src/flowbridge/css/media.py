"""Media-query parsing and breakpoint classification.

Preludes are parsed with a small lark grammar (``media.lark``) into
``MediaQuery`` objects, then classified into a ``MediaRoute`` describing
where the block's declarations belong in the desktop-first target model.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.css.errors import MediaQueryError

__all__ = [
    "MediaFeature",
    "MediaQuery",
    "MediaRoute",
    "RouteKind",
    "classify_media_query",
    "parse_media_query",
]

GRAMMAR_PATH = Path(__file__).parent / "media.lark"

# Max-width tiers, narrowest first: (inclusive upper bound, tier).
MAX_WIDTH_TIERS = ((479, "tiny"), (767, "small"), (991, "medium"))
# Cascade-up tiers, widest first: (inclusive lower bound, tier).
MIN_WIDTH_UP_TIERS = ((1920, "xxxlarge"), (1440, "xxlarge"), (1280, "xlarge"))
# Min-width below the cascade-up range: tiers that receive backfilled values.
MIN_WIDTH_OVERRIDES = (
    (992, ("medium", "small", "tiny")),
    (768, ("small", "tiny")),
    (480, ("tiny",)),
)

STANDARD_MAX_WIDTHS = frozenset({479, 767, 991})
STANDARD_MIN_WIDTHS = frozenset({480, 768, 992, 1280, 1440, 1920})

_SCREEN_TYPES = frozenset({"all", "screen"})
_WIDTH_FEATURES = frozenset({"width", "min-width", "max-width"})
_LENGTH_RE = re.compile(r"^(-?\d*\.?\d+)(px|rem|em)?$")
# Operator as seen from the feature when the length is written first.
_FLIPPED_OPS = {"<": ">", "<=": ">=", ">": "<", ">=": "<=", "=": "="}


# ---------------------------------------------------------------------------
# Parsed model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MediaFeature:
    """A single parenthesized media feature.

    ``op`` is ``":"`` for plain features, a comparison for range features
    and ``None`` for boolean features such as ``(hover)``.
    """

    name: str
    value: str | None = None
    op: str | None = ":"


@dataclass(frozen=True)
class MediaQuery:
    media_type: str | None = None
    modifier: str | None = None
    features: tuple[MediaFeature, ...] = ()
    uses_or: bool = False
    negated: bool = False


class _MediaTransformer(Transformer):  # type: ignore[type-arg]
    """Transform the lark parse tree into MediaQuery objects."""

    def start(self, items: list[MediaQuery]) -> tuple[MediaQuery, ...]:
        return tuple(items)

    def typed_query(self, items: list[object]) -> MediaQuery:
        modifier = None
        media_type = None
        condition: dict[str, object] = {"features": (), "uses_or": False, "negated": False}
        for item in items:
            if isinstance(item, Token) and item.type == "IDENT":
                media_type = str(item)
            elif isinstance(item, str) and item in ("not", "only"):
                modifier = item
            elif isinstance(item, dict):
                condition = item
        return MediaQuery(
            media_type=media_type,
            modifier=modifier,
            features=condition["features"],  # type: ignore[arg-type]
            uses_or=bool(condition["uses_or"]),
            negated=bool(condition["negated"]),
        )

    def bare_query(self, items: list[dict[str, object]]) -> MediaQuery:
        condition = items[0]
        return MediaQuery(
            features=condition["features"],  # type: ignore[arg-type]
            uses_or=bool(condition["uses_or"]),
            negated=bool(condition["negated"]),
        )

    def not_modifier(self, items: list[Token]) -> str:
        return "not"

    def only_modifier(self, items: list[Token]) -> str:
        return "only"

    def negation(self, items: list[Token]) -> str:
        return "negation"

    def and_connector(self, items: list[Token]) -> str:
        return "and"

    def or_connector(self, items: list[Token]) -> str:
        return "or"

    def media_condition(self, items: list[object]) -> dict[str, object]:
        features: list[MediaFeature] = []
        uses_or = False
        negated = False
        for item in items:
            if item == "negation":
                negated = True
            elif item == "or":
                uses_or = True
            elif isinstance(item, MediaFeature):
                features.append(item)
            elif isinstance(item, tuple):
                features.extend(item)
            elif isinstance(item, dict):
                features.extend(item["features"])  # type: ignore[arg-type]
                uses_or = uses_or or bool(item["uses_or"])
                negated = negated or bool(item["negated"])
        return {"features": tuple(features), "uses_or": uses_or, "negated": negated}

    def plain_feature(self, items: list[object]) -> MediaFeature:
        return MediaFeature(name=str(items[0]), value=str(items[1]), op=":")

    def range_feature(self, items: list[object]) -> MediaFeature:
        return MediaFeature(name=str(items[0]), value=str(items[2]), op=str(items[1]))

    def reversed_range_feature(self, items: list[Token]) -> MediaFeature:
        length, op, name = (str(t) for t in items)
        return MediaFeature(name=name, value=length, op=_FLIPPED_OPS[op])

    def interval_feature(self, items: list[object]) -> tuple[MediaFeature, MediaFeature]:
        """``(400px < width <= 700px)`` becomes a lower and an upper bound."""
        low, low_op, name, high_op, high = (str(t) for t in items)
        return (
            MediaFeature(name=name, value=low, op=_FLIPPED_OPS[low_op]),
            MediaFeature(name=name, value=high, op=high_op),
        )

    def boolean_feature(self, items: list[Token]) -> MediaFeature:
        return MediaFeature(name=str(items[0]), value=None, op=None)

    def nested_condition(self, items: list[dict[str, object]]) -> dict[str, object]:
        return items[0]

    def value(self, items: list[Token]) -> str:
        return " ".join(str(t) for t in items)


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(GRAMMAR_PATH.read_text(), parser="lalr", start="start")


def parse_media_query(prelude: str) -> tuple[MediaQuery, ...]:
    """Parse a media prelude into one MediaQuery per comma-separated query."""
    try:
        tree = _parser().parse(prelude.strip().lower())
    except LarkError as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        raise MediaQueryError(str(e), line=line, column=column) from e
    return _MediaTransformer().transform(tree)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class RouteKind(Enum):
    BASE = "base"
    MAX_WIDTH = "max-width"
    MIN_WIDTH_UP = "min-width-up"
    MIN_WIDTH_INVERT = "min-width-invert"
    NON_STANDARD = "non-standard"


@dataclass(frozen=True)
class MediaRoute:
    """Where a media block's declarations are routed.

    Attributes:
        kind: Routing regime.
        tier: Target breakpoint bucket for MAX_WIDTH and MIN_WIDTH_UP.
        threshold_px: The width threshold, normalized to pixels.
        override_tiers: For MIN_WIDTH_INVERT, tiers receiving backfill.
        rounded: Whether the threshold is off a standard boundary.
        reason: Why a NON_STANDARD query was diverted.
    """

    kind: RouteKind
    tier: str | None = None
    threshold_px: float | None = None
    override_tiers: tuple[str, ...] = ()
    rounded: bool = False
    reason: str = ""


def to_pixels(value: str, rem_base_px: float = 16.0) -> float | None:
    """Convert ``767px`` / ``48em`` / ``30rem`` / ``0`` to pixels."""
    match = _LENGTH_RE.match(value.strip())
    if not match:
        return None
    number = float(match.group(1))
    unit = match.group(2)
    if unit in ("rem", "em"):
        return number * rem_base_px
    if unit is None and number != 0:
        return None
    return number


def _width_bounds(
    features: tuple[MediaFeature, ...], rem_base_px: float
) -> tuple[float | None, float | None, str]:
    """Return (max_px, min_px, error) for width-only feature sets."""
    max_px: float | None = None
    min_px: float | None = None
    for feature in features:
        if feature.name not in _WIDTH_FEATURES:
            return None, None, f"media feature '{feature.name}'"
        if feature.value is None:
            return None, None, f"boolean media feature '{feature.name}'"
        px = to_pixels(feature.value, rem_base_px)
        if px is None:
            return None, None, f"unsupported length '{feature.value}'"

        op = feature.op
        if feature.name == "max-width":
            op = "<="
        elif feature.name == "min-width":
            op = ">="
        if op == "<":
            op, px = "<=", px - 1
        elif op == ">":
            op, px = ">=", px + 1

        if op == "<=":
            max_px = px if max_px is None else min(max_px, px)
        elif op == ">=":
            min_px = px if min_px is None else max(min_px, px)
        else:
            return None, None, f"exact width '{feature.value}'"
    return max_px, min_px, ""


def _route_max_width(max_px: float) -> MediaRoute:
    width = math.floor(max_px)
    rounded = width not in STANDARD_MAX_WIDTHS
    for bound, tier in MAX_WIDTH_TIERS:
        if width <= bound:
            return MediaRoute(RouteKind.MAX_WIDTH, tier=tier, threshold_px=max_px, rounded=rounded)
    return MediaRoute(RouteKind.MAX_WIDTH, tier="desktop", threshold_px=max_px, rounded=rounded)


def _route_min_width(min_px: float) -> MediaRoute:
    width = math.ceil(min_px)
    for bound, tier in MIN_WIDTH_UP_TIERS:
        if width >= bound:
            return MediaRoute(
                RouteKind.MIN_WIDTH_UP,
                tier=tier,
                threshold_px=min_px,
                rounded=width not in STANDARD_MIN_WIDTHS,
            )
    for bound, tiers in MIN_WIDTH_OVERRIDES:
        if width >= bound:
            return MediaRoute(
                RouteKind.MIN_WIDTH_INVERT,
                threshold_px=min_px,
                override_tiers=tiers,
                rounded=width not in STANDARD_MIN_WIDTHS,
            )
    return MediaRoute(RouteKind.MIN_WIDTH_INVERT, threshold_px=min_px)


def classify_media_query(prelude: str, config: ConverterConfig | None = None) -> MediaRoute:
    """Classify a media prelude into a routing decision.

    Only a single ``all``/``screen`` query constrained solely by width is
    routable; print, orientation, preference and pointer queries,
    ``or``/``not`` logic, comma lists and unparseable preludes are
    NON_STANDARD. When both bounds are present the max-width bound decides.
    """
    config = resolve_config(config)
    try:
        queries = parse_media_query(prelude)
    except MediaQueryError as exc:
        return MediaRoute(RouteKind.NON_STANDARD, reason=f"unparseable query ({exc.__class__.__name__})")

    if len(queries) != 1:
        return MediaRoute(RouteKind.NON_STANDARD, reason="comma-separated query list")
    query = queries[0]
    if query.modifier == "not" or query.negated:
        return MediaRoute(RouteKind.NON_STANDARD, reason="negated query")
    if query.media_type is not None and query.media_type not in _SCREEN_TYPES:
        return MediaRoute(RouteKind.NON_STANDARD, reason=f"media type '{query.media_type}'")
    if query.uses_or:
        return MediaRoute(RouteKind.NON_STANDARD, reason="'or' condition")

    max_px, min_px, error = _width_bounds(query.features, config.rem_base_px)
    if error:
        return MediaRoute(RouteKind.NON_STANDARD, reason=error)
    if max_px is not None:
        return _route_max_width(max_px)
    if min_px is not None:
        return _route_min_width(min_px)
    return MediaRoute(RouteKind.BASE)
