"""Flowbridge model layer -- public type re-exports."""

from flowbridge.model.class_index import (
    BREAKPOINT_TIERS,
    DOWN_TIERS,
    MEDIA_BREAKPOINT_LABELS,
    PSEUDO_STATES,
    UP_TIERS,
    ClassIndex,
    ClassIndexEntry,
)
from flowbridge.model.declarations import (
    Declarations,
    closing_paren,
    merge_declarations,
    merge_preserving,
    parse_style_less,
    split_top_level,
    split_whitespace,
    to_style_less,
)
from flowbridge.model.diagnostic import (
    DiagnosticCollector,
    ParseWarning,
    Severity,
    ValidationIssue,
)
from flowbridge.model.payload import (
    PAYLOAD_TYPE,
    VARIANT_KEYS,
    WebflowNode,
    WebflowStyle,
    build_payload,
)

__all__ = [
    # class_index
    "BREAKPOINT_TIERS",
    "DOWN_TIERS",
    "MEDIA_BREAKPOINT_LABELS",
    "PSEUDO_STATES",
    "UP_TIERS",
    "ClassIndex",
    "ClassIndexEntry",
    # declarations
    "Declarations",
    "closing_paren",
    "merge_declarations",
    "merge_preserving",
    "parse_style_less",
    "split_top_level",
    "split_whitespace",
    "to_style_less",
    # diagnostic
    "DiagnosticCollector",
    "ParseWarning",
    "Severity",
    "ValidationIssue",
    # payload
    "PAYLOAD_TYPE",
    "VARIANT_KEYS",
    "WebflowNode",
    "WebflowStyle",
    "build_payload",
]
