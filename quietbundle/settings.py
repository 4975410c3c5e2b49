"""Build typed bundle settings from the configuration mapping."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import optional_section, require_section
from .errors import ConfigError

REQUIRED_KEYS = ("base", "memory", "profiles", "loader")
BINARY_KEY = "memory"


@dataclass(frozen=True)
class Requirement:
    """A remote artifact to download and how to decode it."""
    key: str
    url: str
    binary: bool


@dataclass(frozen=True)
class BundleSettings:
    """Everything a pipeline run needs, resolved and validated."""
    requirements: List[Requirement]
    profiles_anchor: str
    read_async_anchor: str
    docs_prefix: str
    timeout_s: Optional[float]
    package_json: Path
    template: Path
    bundle_path: Path
    declarations_path: Path

    def requirement(self, key: str) -> Requirement:
        for req in self.requirements:
            if req.key == key:
                return req
        raise KeyError(key)


def _require_str(value: object, label: str) -> str:
    """Ensure required fields are present and non-empty."""
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{label} is missing or not a string")
    return value


def _join_url(base_url: str, name: str) -> str:
    if not base_url.endswith("/"):
        base_url += "/"
    return base_url + name.lstrip("/")


def build_requirements(
    base_url: str,
    files: Dict[str, Any],
    binary_suffix: str,
) -> List[Requirement]:
    """Build the requirement set and apply the binary-suffix rule.

    Exactly one URL may end with ``binary_suffix`` and it must belong to the
    memory image; anything else is a configuration error.
    """
    missing = [k for k in REQUIRED_KEYS if k not in files]
    if missing:
        raise ConfigError(f"sources.requirements is missing keys: {', '.join(missing)}")
    unknown = sorted(k for k in files if k not in REQUIRED_KEYS)
    if unknown:
        raise ConfigError(f"sources.requirements has unknown keys: {', '.join(unknown)}")

    reqs: List[Requirement] = []
    for key in REQUIRED_KEYS:
        name = _require_str(files[key], f"sources.requirements.{key}")
        url = _join_url(base_url, name.strip())
        reqs.append(Requirement(key=key, url=url, binary=url.endswith(binary_suffix)))

    binary_keys = [r.key for r in reqs if r.binary]
    if not binary_keys:
        raise ConfigError(f'No requirement URL ends with binary suffix "{binary_suffix}"')
    if len(binary_keys) > 1:
        raise ConfigError(
            f'More than one requirement URL ends with binary suffix "{binary_suffix}": '
            + ", ".join(binary_keys)
        )
    if binary_keys[0] != BINARY_KEY:
        raise ConfigError(
            f'Binary suffix "{binary_suffix}" matched "{binary_keys[0]}", expected "{BINARY_KEY}"'
        )
    return reqs


def _parse_timeout(value: object) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError("fetch.timeout_s must be a positive number or null")
    return float(value)


def load_settings(
    config: Dict[str, Any],
    *,
    root: Path,
    base_url: Optional[str] = None,
    template: Optional[str] = None,
    package_json: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> BundleSettings:
    """Resolve settings from config, with CLI overrides taking precedence."""
    sources = require_section(config, "sources", dict)
    patches = require_section(config, "patches", dict)
    paths = require_section(config, "paths", dict)
    fetch_cfg = optional_section(config, "fetch")

    files = sources.get("requirements")
    if not isinstance(files, dict):
        raise ConfigError('Config section "sources.requirements" missing or not a dict')

    requirements = build_requirements(
        _require_str(base_url or sources.get("base_url"), "sources.base_url"),
        files,
        _require_str(sources.get("binary_suffix"), "sources.binary_suffix"),
    )

    def _path(value: object, label: str) -> Path:
        p = Path(_require_str(value, label)).expanduser()
        return p if p.is_absolute() else root / p

    return BundleSettings(
        requirements=requirements,
        profiles_anchor=_require_str(patches.get("profiles_anchor"), "patches.profiles_anchor"),
        read_async_anchor=_require_str(patches.get("read_async_anchor"), "patches.read_async_anchor"),
        docs_prefix=_require_str(patches.get("docs_prefix"), "patches.docs_prefix"),
        timeout_s=timeout_s if timeout_s is not None else _parse_timeout(fetch_cfg.get("timeout_s")),
        package_json=_path(package_json or paths.get("package_json"), "paths.package_json"),
        template=_path(template or paths.get("template"), "paths.template"),
        bundle_path=_path(paths.get("bundle"), "paths.bundle"),
        declarations_path=_path(paths.get("declarations"), "paths.declarations"),
    )
