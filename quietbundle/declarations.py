"""Generate the TypeScript declaration file from the profile catalog."""

from __future__ import annotations

import json
import re
from typing import Iterable

from .errors import PlaceholderNotFound

PROFILE_NAME_RE = re.compile(r"type ProfileName = ['\"A-Za-z0-9_.| -]*;")


def _ts_string(value: str) -> str:
    # JSON escaping covers control characters and line separators.
    escaped = json.dumps(value)[1:-1].replace("'", "\\'")
    return f"'{escaped}'"


def render_profile_union(names: Iterable[str]) -> str:
    """Render names as a TypeScript string-literal union."""
    parts = [_ts_string(n) for n in names]
    return " | ".join(parts) if parts else "never"


def render_declarations(template: str, names: Iterable[str]) -> str:
    """Replace the ProfileName placeholder in ``template`` with the union of ``names``."""
    matches = PROFILE_NAME_RE.findall(template)
    if not matches:
        raise PlaceholderNotFound("Template has no 'type ProfileName = ...;' declaration")
    if len(matches) > 1:
        raise PlaceholderNotFound(
            f"Template has {len(matches)} 'type ProfileName = ...;' declarations, expected one"
        )
    union = render_profile_union(names)
    return PROFILE_NAME_RE.sub(lambda _m: f"type ProfileName = {union};", template, count=1)
