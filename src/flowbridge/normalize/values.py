"""Functional-value rewriting for functions the target cannot evaluate."""

from __future__ import annotations

import re

from flowbridge.model.declarations import closing_paren, split_top_level

__all__ = ["rewrite_functional_values"]

# clamp()/min()/max() but not minmax() or vendor-prefixed names.
_FUNCTION_RE = re.compile(r"(?<![\w-])(clamp|min|max)\(", re.IGNORECASE)


def rewrite_functional_values(value: str) -> str:
    """Rewrite ``clamp(a, b, c)`` to ``c`` and ``min(a, ...)``/``max(a, ...)`` to ``a``.

    Arguments are rewritten before their enclosing call, so nested calls
    resolve innermost first. Unbalanced calls are left untouched.
    """
    pieces: list[str] = []
    pos = 0
    while True:
        match = _FUNCTION_RE.search(value, pos)
        if match is None:
            break
        close = closing_paren(value, match.end() - 1)
        if close is None:
            break
        args = [rewrite_functional_values(a) for a in split_top_level(value[match.end():close], ",")]
        pieces.append(value[pos:match.start()])
        if not args:
            pieces.append(value[match.start():close + 1])
        elif match.group(1).lower() == "clamp":
            pieces.append(args[-1])
        else:
            pieces.append(args[0])
        pos = close + 1
    pieces.append(value[pos:])
    return "".join(pieces)
