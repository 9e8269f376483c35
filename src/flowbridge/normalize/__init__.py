"""Property normalizer: allowlist, shorthands, functional values, layout defaults."""

from flowbridge.normalize.declarations import normalize_declarations
from flowbridge.normalize.layout import apply_layout_defaults, is_layout_container
from flowbridge.normalize.properties import (
    SPACING_LONGHANDS,
    STRIP_PROPERTIES,
    SUPPORTED_PROPERTIES,
    TYPOGRAPHY_PROPERTIES,
)
from flowbridge.normalize.shorthand import (
    expand_border,
    expand_flex,
    expand_grid_placement,
    expand_shorthand,
)
from flowbridge.normalize.values import rewrite_functional_values

__all__ = [
    "SPACING_LONGHANDS",
    "STRIP_PROPERTIES",
    "SUPPORTED_PROPERTIES",
    "TYPOGRAPHY_PROPERTIES",
    "apply_layout_defaults",
    "expand_border",
    "expand_flex",
    "expand_grid_placement",
    "expand_shorthand",
    "is_layout_container",
    "normalize_declarations",
    "rewrite_functional_values",
]
