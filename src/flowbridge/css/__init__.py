"""CSS front end: rule extraction, media queries, selectors and variables.

The resolver is imported from ``flowbridge.css.resolver`` directly.
"""

from flowbridge.css.errors import MediaQueryError
from flowbridge.css.extractor import (
    AtRule,
    CssRule,
    ExtractedStylesheet,
    MediaBlock,
    extract_rules,
    extract_variables,
    split_declarations,
    strip_comments,
)
from flowbridge.css.media import MediaRoute, RouteKind, classify_media_query, parse_media_query
from flowbridge.css.selectors import ELEMENT_TO_CLASS, SelectorTarget, parse_selector
from flowbridge.css.variables import VariableTable, resolve_value

__all__ = [
    "AtRule",
    "CssRule",
    "ELEMENT_TO_CLASS",
    "ExtractedStylesheet",
    "MediaBlock",
    "MediaQueryError",
    "MediaRoute",
    "RouteKind",
    "SelectorTarget",
    "VariableTable",
    "classify_media_query",
    "extract_rules",
    "extract_variables",
    "parse_media_query",
    "parse_selector",
    "resolve_value",
    "split_declarations",
    "strip_comments",
]
