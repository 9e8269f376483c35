"""Rule extractor: tokenizes CSS text into base rules, media blocks and at-rules.

Blocks are matched by explicit brace-depth counting (quoted strings are
skipped), so nested at-rule bodies never terminate a match early:

    :root { --brand: #0af; }
    .card { color: var(--brand); }
    @media (max-width: 767px) { .card { padding: 8px; } }
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from flowbridge.css.variables import VariableTable
from flowbridge.model.declarations import split_top_level

__all__ = [
    "AtRule",
    "CssRule",
    "ExtractedStylesheet",
    "MediaBlock",
    "extract_rules",
    "extract_variables",
    "split_declarations",
    "strip_comments",
]

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)
_AT_NAME_RE = re.compile(r"@([\w-]+)")

# Selectors whose custom properties are global.
_ROOT_SELECTORS = (":root",)
_GLOBAL_SELECTORS = ("html", "body", "*")


@dataclass(frozen=True)
class CssRule:
    """A qualified rule: a selector list and its raw declaration text."""

    selector: str
    body: str


@dataclass(frozen=True)
class MediaBlock:
    """An ``@media`` block with its prelude and inner rules."""

    query: str
    rules: tuple[CssRule, ...]
    raw: str


@dataclass(frozen=True)
class AtRule:
    """Any other at-rule, kept verbatim."""

    name: str
    prelude: str
    body: str | None
    raw: str


@dataclass(frozen=True)
class ExtractedStylesheet:
    rules: tuple[CssRule, ...]
    media: tuple[MediaBlock, ...]
    at_rules: tuple[AtRule, ...]
    variables: VariableTable


@dataclass(frozen=True)
class _Block:
    prelude: str
    body: str | None
    raw: str


def strip_comments(css: str) -> str:
    return _COMMENT_RE.sub("", css)


def _skip_string(css: str, start: int) -> int:
    """Return the index just past the string literal opening at *start*."""
    quote = css[start]
    i = start + 1
    while i < len(css):
        if css[i] == "\\":
            i += 2
            continue
        if css[i] == quote:
            return i + 1
        i += 1
    return len(css)


def _match_brace(css: str, open_index: int) -> int:
    """Return the index of the brace closing the one at *open_index*.

    An unterminated block extends to the end of the text.
    """
    depth = 0
    i = open_index
    while i < len(css):
        ch = css[i]
        if ch in "\"'":
            i = _skip_string(css, i)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return len(css)


def _iter_blocks(css: str) -> Iterator[_Block]:
    """Yield top-level blocks and semicolon-terminated statements in order."""
    i = 0
    start = 0
    n = len(css)
    while i < n:
        ch = css[i]
        if ch in "\"'":
            i = _skip_string(css, i)
            continue
        if ch == "{":
            end = _match_brace(css, i)
            prelude = css[start:i].strip()
            yield _Block(prelude=prelude, body=css[i + 1:end], raw=css[start:end + 1].strip())
            i = end + 1
            start = i
            continue
        if ch == ";":
            prelude = css[start:i].strip()
            if prelude:
                yield _Block(prelude=prelude, body=None, raw=css[start:i + 1].strip())
            start = i + 1
        elif ch == "}":
            # Stray closing brace: discard whatever preceded it.
            start = i + 1
        i += 1


def _parse_rules(css: str) -> list[CssRule]:
    rules: list[CssRule] = []
    for block in _iter_blocks(css):
        if block.body is None or not block.prelude or block.prelude.startswith("@"):
            continue
        rules.append(CssRule(selector=block.prelude, body=block.body))
    return rules


def split_declarations(text: str) -> list[tuple[str, str]]:
    """Split a declaration block into ``(name, value)`` pairs.

    Splitting happens on semicolons outside parentheses and strings, so
    values such as ``url(data:image/png;base64,...)`` stay intact.
    Property names are lower-cased (custom properties keep their case) and
    a trailing ``!important`` is dropped.
    """
    pairs: list[tuple[str, str]] = []
    for piece in split_top_level(text, ";"):
        name, sep, value = piece.partition(":")
        name = name.strip()
        if not sep or not name:
            continue
        if not name.startswith("--"):
            name = name.lower()
        value = _IMPORTANT_RE.sub("", value).strip()
        if value:
            pairs.append((name, value))
    return pairs


def _selector_parts(selector: str) -> list[str]:
    return [part.strip().lower() for part in split_top_level(selector, ",")]


def extract_variables(rules: list[CssRule] | tuple[CssRule, ...]) -> VariableTable:
    """Collect custom properties from ``:root`` blocks, then html/body/``*``.

    The first definition of a name wins across the whole document.
    """
    table = VariableTable()
    for targets in (_ROOT_SELECTORS, _GLOBAL_SELECTORS):
        for rule in rules:
            if not any(part in targets for part in _selector_parts(rule.selector)):
                continue
            for name, value in split_declarations(rule.body):
                if name.startswith("--"):
                    table.define(name, value)
    return table


def extract_rules(css: str) -> ExtractedStylesheet:
    """Tokenize *css* into base rules, media blocks, other at-rules and variables."""
    css = strip_comments(css)
    rules: list[CssRule] = []
    media: list[MediaBlock] = []
    at_rules: list[AtRule] = []

    for block in _iter_blocks(css):
        if not block.prelude:
            continue
        if block.prelude.startswith("@"):
            match = _AT_NAME_RE.match(block.prelude)
            name = match.group(1).lower() if match else ""
            prelude = block.prelude[match.end():].strip() if match else block.prelude
            if name == "media" and block.body is not None:
                media.append(
                    MediaBlock(query=prelude, rules=tuple(_parse_rules(block.body)), raw=block.raw)
                )
            else:
                at_rules.append(AtRule(name=name, prelude=prelude, body=block.body, raw=block.raw))
            continue
        if block.body is not None:
            rules.append(CssRule(selector=block.prelude, body=block.body))

    scoped = rules + [rule for block in media for rule in block.rules]
    return ExtractedStylesheet(
        rules=tuple(rules),
        media=tuple(media),
        at_rules=tuple(at_rules),
        variables=extract_variables(scoped),
    )
