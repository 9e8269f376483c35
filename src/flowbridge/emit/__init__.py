"""Style graph emitter."""

from flowbridge.emit.emitter import BREAKPOINT_VARIANTS, embed_node, emit_style, emit_styles
from flowbridge.emit.grid import (
    estimate_auto_fit_columns,
    expand_repeat,
    force_visible,
    normalize_grid_styles,
)
from flowbridge.emit.ids import IdRegistry
from flowbridge.model.payload import build_payload

__all__ = [
    "BREAKPOINT_VARIANTS",
    "IdRegistry",
    "build_payload",
    "embed_node",
    "emit_style",
    "emit_styles",
    "estimate_auto_fit_columns",
    "expand_repeat",
    "force_visible",
    "normalize_grid_styles",
]
