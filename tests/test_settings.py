from __future__ import annotations

import copy
from pathlib import Path

import pytest

from conftest import BASE_URL, CONFIG
from quietbundle.config import DEFAULT_CONFIG_PATH, load_config, resolve_config_path
from quietbundle.errors import ConfigError
from quietbundle.settings import build_requirements, load_settings


def _files() -> dict:
    return dict(CONFIG["sources"]["requirements"])


def test_requirements_apply_binary_suffix() -> None:
    reqs = build_requirements(BASE_URL, _files(), "mem")
    assert [r.key for r in reqs] == ["base", "memory", "profiles", "loader"]
    assert {r.key: r.binary for r in reqs} == {
        "base": False,
        "memory": True,
        "profiles": False,
        "loader": False,
    }
    assert reqs[0].url == BASE_URL + "quiet.js"


def test_base_url_without_trailing_slash() -> None:
    reqs = build_requirements("https://example.test/quiet", _files(), "mem")
    assert reqs[0].url == "https://example.test/quiet/quiet.js"


def test_missing_requirement_key() -> None:
    files = _files()
    del files["loader"]
    with pytest.raises(ConfigError, match="loader"):
        build_requirements(BASE_URL, files, "mem")


def test_no_binary_url_is_config_error() -> None:
    with pytest.raises(ConfigError, match="No requirement URL"):
        build_requirements(BASE_URL, _files(), "wasm")


def test_multiple_binary_urls_is_config_error() -> None:
    with pytest.raises(ConfigError, match="More than one"):
        build_requirements(BASE_URL, _files(), "js")


def test_binary_suffix_on_wrong_key_is_config_error() -> None:
    with pytest.raises(ConfigError, match="expected"):
        build_requirements(BASE_URL, _files(), "json")


def test_paths_resolve_against_root(tmp_path: Path) -> None:
    settings = load_settings(CONFIG, root=tmp_path)
    assert settings.bundle_path == tmp_path / "_bundle.js"
    assert settings.declarations_path == tmp_path / "index.d.ts"
    assert settings.template == tmp_path / "template.index.d.ts"
    assert settings.timeout_s is None


def test_overrides_take_precedence(tmp_path: Path) -> None:
    settings = load_settings(
        CONFIG,
        root=tmp_path,
        base_url="https://mirror.test/",
        template="/abs/template.d.ts",
        timeout_s=12.5,
    )
    assert settings.requirement("memory").url == "https://mirror.test/quiet-emscripten.js.mem"
    assert settings.template == Path("/abs/template.d.ts")
    assert settings.timeout_s == 12.5


def test_missing_section(tmp_path: Path) -> None:
    cfg = copy.deepcopy(CONFIG)
    del cfg["patches"]
    with pytest.raises(ConfigError, match="patches"):
        load_settings(cfg, root=tmp_path)


def test_invalid_timeout(tmp_path: Path) -> None:
    cfg = copy.deepcopy(CONFIG)
    cfg["fetch"]["timeout_s"] = -1
    with pytest.raises(ConfigError, match="timeout"):
        load_settings(cfg, root=tmp_path)


def test_default_config_is_valid(tmp_path: Path) -> None:
    settings = load_settings(load_config(str(DEFAULT_CONFIG_PATH)), root=tmp_path)
    assert settings.requirement("memory").binary
    assert settings.read_async_anchor == 'Module["readAsync"]'


def test_config_path_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    p = tmp_path / "custom.yaml"
    monkeypatch.setenv("QUIET_BUNDLE_CONFIG", str(p))
    assert resolve_config_path() == p.resolve()
    assert resolve_config_path(str(tmp_path / "cli.yaml")) == (tmp_path / "cli.yaml").resolve()


def test_config_must_be_mapping(tmp_path: Path) -> None:
    p = tmp_path / "bad.yaml"
    p.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(str(p))


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(str(tmp_path / "absent.yaml"))
