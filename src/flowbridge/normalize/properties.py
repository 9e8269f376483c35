"""Property vocabularies for the normalizer."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Supported properties
# ---------------------------------------------------------------------------

_LAYOUT = (
    "display", "flex-direction", "flex-wrap", "justify-content", "align-items",
    "align-content", "align-self", "flex", "flex-grow", "flex-shrink",
    "flex-basis", "order", "gap", "row-gap", "column-gap",
    "grid-row-gap", "grid-column-gap",
    "grid-template-columns", "grid-template-rows", "grid-column", "grid-row",
    "grid-column-start", "grid-column-end", "grid-row-start", "grid-row-end",
    "grid-auto-rows", "grid-auto-columns", "grid-auto-flow",
)

_SIZING = (
    "width", "height", "min-width", "max-width", "min-height", "max-height",
    "aspect-ratio",
)

_SPACING = (
    "padding", "padding-top", "padding-right", "padding-bottom", "padding-left",
    "margin", "margin-top", "margin-right", "margin-bottom", "margin-left",
)

_POSITIONING = (
    "position", "top", "right", "bottom", "left", "z-index", "float", "clear",
)

_BACKGROUND = (
    "background", "background-color", "background-image", "background-size",
    "background-position", "background-repeat", "background-clip",
    "-webkit-background-clip", "-webkit-text-fill-color",
)

_TYPOGRAPHY = (
    "color", "font-family", "font-size", "font-weight", "font-style",
    "line-height", "letter-spacing", "text-align", "text-decoration",
    "text-transform", "text-indent", "text-shadow", "white-space",
)

_BORDER = (
    "border", "border-width", "border-style", "border-color",
    "border-top", "border-top-width", "border-top-style", "border-top-color",
    "border-right", "border-right-width", "border-right-style", "border-right-color",
    "border-bottom", "border-bottom-width", "border-bottom-style", "border-bottom-color",
    "border-left", "border-left-width", "border-left-style", "border-left-color",
    "border-radius", "border-top-left-radius", "border-top-right-radius",
    "border-bottom-right-radius", "border-bottom-left-radius",
)

_EFFECTS = (
    "opacity", "box-shadow", "filter", "backdrop-filter", "mix-blend-mode",
    "overflow", "overflow-x", "overflow-y", "transform", "transform-origin",
)

_MISC = (
    "visibility", "cursor", "pointer-events", "user-select",
    "list-style", "list-style-type", "list-style-position",
    "object-fit", "object-position",
    "outline", "outline-width", "outline-style", "outline-color", "outline-offset",
)

SUPPORTED_PROPERTIES = frozenset(
    _LAYOUT + _SIZING + _SPACING + _POSITIONING + _BACKGROUND
    + _TYPOGRAPHY + _BORDER + _EFFECTS + _MISC
)

# Dropped silently: no meaning in a static design file.
STRIP_PROPERTIES = frozenset({
    "transition", "transition-property", "transition-duration",
    "transition-timing-function", "transition-delay",
    "animation", "animation-name", "animation-duration",
    "animation-timing-function", "animation-delay",
    "animation-iteration-count", "animation-fill-mode",
    "-webkit-transition", "-webkit-animation", "-moz-transition", "-moz-animation",
    "-webkit-font-smoothing", "-moz-osx-font-smoothing",
})

SHORTHAND_EXPANSIONS: dict[str, tuple[str, ...]] = {
    "padding": ("padding-top", "padding-right", "padding-bottom", "padding-left"),
    "margin": ("margin-top", "margin-right", "margin-bottom", "margin-left"),
    "border-radius": (
        "border-top-left-radius",
        "border-top-right-radius",
        "border-bottom-right-radius",
        "border-bottom-left-radius",
    ),
    "gap": ("row-gap", "column-gap"),
}

# ---------------------------------------------------------------------------
# Element-selector recovery sets
# ---------------------------------------------------------------------------

TYPOGRAPHY_PROPERTIES = frozenset({
    "font-family", "font-size", "font-weight", "font-style", "line-height",
    "letter-spacing", "color", "text-transform", "text-decoration",
})

SPACING_LONGHANDS = frozenset({
    "padding-top", "padding-right", "padding-bottom", "padding-left",
    "margin-top", "margin-right", "margin-bottom", "margin-left",
    "row-gap", "column-gap",
})


def is_supported(name: str) -> bool:
    return name in SUPPORTED_PROPERTIES
