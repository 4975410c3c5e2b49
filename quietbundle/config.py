"""Load and validate the YAML configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

CONFIG_ENV_VAR = "QUIET_BUNDLE_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "bundle.yaml"


def _load_config(path: Path) -> Dict[str, Any]:
    """Read the YAML config from disk and validate its top-level type."""
    if not path.exists():
        raise ConfigError(f'Config file not found: "{path}"')
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f'Failed to read config "{path}": {e}') from e
    if not isinstance(data, dict):
        raise ConfigError(f'Config file "{path}" must be a YAML mapping at top level')
    return data


def resolve_config_path(explicit: Optional[str] = None) -> Path:
    """Resolve the config path from the CLI, env override or default."""
    if explicit:
        return Path(explicit).expanduser().resolve()
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return DEFAULT_CONFIG_PATH


def load_config(explicit: Optional[str] = None) -> Dict[str, Any]:
    """Load the configuration mapping."""
    return _load_config(resolve_config_path(explicit))


def require_section(config: Dict[str, Any], name: str, kind: type) -> Any:
    """Fetch a required config section and validate its type."""
    value = config.get(name)
    if not isinstance(value, kind):
        raise ConfigError(f'Config section "{name}" missing or not a {kind.__name__}')
    return value


def optional_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return an optional mapping section or an empty mapping."""
    value = config.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f'Config section "{name}" must be a mapping')
    return value
