"""Final style normalization before emission.

Grid containers get explicit track lists and target-specific gap keys;
every style optionally gets the forced-visible override.
"""

from __future__ import annotations

import math
import re
from typing import Mapping

from flowbridge.config import ConverterConfig, resolve_config
from flowbridge.model.declarations import Declarations, closing_paren, split_top_level

__all__ = ["estimate_auto_fit_columns", "expand_repeat", "force_visible", "normalize_grid_styles"]

_REPEAT_RE = re.compile(r"(?<![\w-])repeat\(", re.IGNORECASE)
_MINMAX_MIN_RE = re.compile(r"minmax\(\s*([\d.]+)\s*(px|rem|em)\s*,", re.IGNORECASE)
_AUTO_REPEAT_RE = re.compile(r"auto-(fit|fill)", re.IGNORECASE)

_HIDDEN_OPACITY = frozenset({"0", "0%", "0.0"})


def force_visible(decls: Mapping[str, str]) -> Declarations:
    """Rewrite ``opacity: 0`` and ``visibility: hidden`` to visible values."""
    result = dict(decls)
    if result.get("opacity", "").strip() in _HIDDEN_OPACITY:
        result["opacity"] = "1"
    if result.get("visibility", "").strip().lower() == "hidden":
        result["visibility"] = "visible"
    return result


def expand_repeat(template: str, max_tracks: int = 12) -> str:
    """Expand every ``repeat(N, tracks)`` in place.

    ``N`` must be an integer between 1 and *max_tracks*; other repeats
    (including ``auto-fit``/``auto-fill``) are left as written.

    >>> expand_repeat("200px repeat(2, minmax(0, 1fr))")
    '200px minmax(0, 1fr) minmax(0, 1fr)'
    """
    pieces: list[str] = []
    pos = 0
    while True:
        match = _REPEAT_RE.search(template, pos)
        if match is None:
            break
        close = closing_paren(template, match.end() - 1)
        if close is None:
            break
        args = split_top_level(template[match.end():close], ",")
        pieces.append(template[pos:match.start()])
        count = args[0] if args else ""
        if len(args) == 2 and count.isdigit() and 1 <= int(count) <= max_tracks:
            pieces.append(" ".join([args[1]] * int(count)))
        else:
            pieces.append(template[match.start():close + 1])
        pos = close + 1
    pieces.append(template[pos:])
    return "".join(pieces).strip()


def estimate_auto_fit_columns(template: str, config: ConverterConfig | None = None) -> int | None:
    """Estimate the column count of an ``auto-fit``/``auto-fill`` template.

    Uses the pixel minimum of its ``minmax()`` against the configured
    container width. Returns None when no usable minimum exists.
    """
    config = resolve_config(config)
    match = _MINMAX_MIN_RE.search(template)
    if match is None:
        return None
    minimum = float(match.group(1))
    if match.group(2).lower() in ("rem", "em"):
        minimum *= config.rem_base_px
    if minimum <= 0:
        return None
    estimate = math.floor(config.auto_fit_container_px / minimum)
    return max(1, min(config.auto_fit_max_columns, estimate))


def _normalize_template(template: str, config: ConverterConfig) -> str:
    if _AUTO_REPEAT_RE.search(template):
        columns = estimate_auto_fit_columns(template, config)
        if columns is None:
            return template
        return " ".join(["1fr"] * columns)
    return expand_repeat(template, config.max_repeat_tracks)


def normalize_grid_styles(
    decls: Mapping[str, str],
    *,
    is_grid: bool,
    config: ConverterConfig | None = None,
) -> Declarations:
    """Apply the final emission pass to one declarations bucket."""
    config = resolve_config(config)
    result = force_visible(decls) if config.force_visible else dict(decls)
    if not is_grid:
        return result

    row_gap = result.get("row-gap") or result.get("gap")
    column_gap = result.get("column-gap") or result.get("gap")
    if row_gap and "grid-row-gap" not in result:
        result["grid-row-gap"] = row_gap
    if column_gap and "grid-column-gap" not in result:
        result["grid-column-gap"] = column_gap
    for key in ("gap", "row-gap", "column-gap"):
        result.pop(key, None)

    for key in ("grid-template-columns", "grid-template-rows"):
        if key in result:
            result[key] = _normalize_template(result[key], config)
    return result
