"""Locate and replace the body of a named function in source text."""

from __future__ import annotations

from typing import Tuple

from .errors import AnchorNotFound, UnbalancedBraces


def find_function_body(code: str, anchor: str) -> Tuple[int, int]:
    """Return the ``(start, end)`` span of the body following ``anchor``.

    ``start`` is just after the first ``{`` found after the anchor and ``end``
    is the index of the matching ``}``. Every brace counts, including braces
    inside string or comment literals.
    """
    if not anchor:
        raise AnchorNotFound(anchor)
    pos = code.find(anchor)
    if pos == -1:
        raise AnchorNotFound(anchor)

    depth = 0
    start = -1
    for i in range(pos + len(anchor), len(code)):
        ch = code[i]
        if ch == "{":
            if depth == 0:
                start = i + 1
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                raise UnbalancedBraces(anchor, f"unexpected '}}' at offset {i}")
            if depth == 0:
                return start, i

    if start == -1:
        raise UnbalancedBraces(anchor, "no '{' after anchor")
    raise UnbalancedBraces(anchor, f"body opened at offset {start - 1} is never closed")


def replace_function_body(code: str, anchor: str, replacement: str) -> str:
    """Replace the body of the function after ``anchor``, keeping its braces."""
    start, end = find_function_body(code, anchor)
    return code[:start] + replacement + code[end:]
