"""Read profile names and package metadata."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from .errors import ConfigError, ParseFailure


def extract_profile_names(text: str) -> List[str]:
    """Return the top-level keys of the profile catalog in document order."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseFailure(f"Profile catalog is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseFailure(
            f"Profile catalog must be a JSON object, got {type(data).__name__}"
        )
    return list(data.keys())


def read_display_name(path: Path) -> str:
    """Return the ``name`` field of a package.json file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f'Failed to read package metadata "{path}": {e}') from e
    except json.JSONDecodeError as e:
        raise ConfigError(f'Package metadata "{path}" is not valid JSON: {e}') from e
    name = data.get("name") if isinstance(data, dict) else None
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f'Package metadata "{path}" has no "name"')
    return name.strip()
