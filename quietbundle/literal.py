"""Embed binary data as a JavaScript expression."""

from __future__ import annotations

import base64
import binascii
import re

from .errors import ParseFailure

LITERAL_PREFIX = "Uint8Array.from(atob(`"
LITERAL_SUFFIX = "`), c => c.charCodeAt(0))"

ATOB_RE = re.compile(r"atob\(`([A-Za-z0-9+/=]*)`\)")


def bytes_to_literal(data: bytes) -> str:
    """Return an expression that rebuilds ``data`` as a Uint8Array at load time."""
    return LITERAL_PREFIX + base64.b64encode(data).decode("ascii") + LITERAL_SUFFIX


def literal_to_bytes(expr: str) -> bytes:
    """Decode the base64 payload of an expression made by ``bytes_to_literal``."""
    m = ATOB_RE.search(expr)
    if not m:
        raise ParseFailure("No atob(`...`) payload found in expression")
    try:
        return base64.b64decode(m.group(1), validate=True)
    except binascii.Error as e:
        raise ParseFailure(f"Invalid base64 payload: {e}") from e
