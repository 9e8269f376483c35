"""Graph safety validator."""

from flowbridge.validation.graph import PayloadShapeError, PayloadView, find_cycles
from flowbridge.validation.preflight import PreflightResult, run_preflight, summarize
from flowbridge.validation.rules import (
    ALL_CHECKS,
    ALLOWED_VARIANT_KEYS,
    RESERVED_CLASS_NAMES,
    check_circular_references,
    check_depth,
    check_embed_size,
    check_node_structure,
    check_references,
    check_styles,
    check_uuids,
    is_reserved_class,
)

__all__ = [
    "ALL_CHECKS",
    "ALLOWED_VARIANT_KEYS",
    "PayloadShapeError",
    "PayloadView",
    "PreflightResult",
    "RESERVED_CLASS_NAMES",
    "check_circular_references",
    "check_depth",
    "check_embed_size",
    "check_node_structure",
    "check_references",
    "check_styles",
    "check_uuids",
    "find_cycles",
    "is_reserved_class",
    "run_preflight",
    "summarize",
]
