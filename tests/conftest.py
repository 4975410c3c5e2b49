from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict

import httpx
import pytest

from quietbundle.settings import BundleSettings, load_settings

BASE_URL = "https://example.test/quiet/"

BASE_JS = """var Quiet = (function() {
    var profiles;
    function setProfilesPrefix(prefix) {
        if (profiles !== undefined) { return; }
        fetchProfiles(prefix + "quiet-profiles.json", function(body) { onProfilesFetch(body); });
    }
    function onProfilesFetch(body) { profiles = JSON.parse(body); }
    return { init: function(opts) { setProfilesPrefix(opts.profilesPrefix); } };
})()"""

LOADER_JS = """var Module = {};
Module["readAsync"] = function readAsync(url, onload, onerror) {
    var xhr = new XMLHttpRequest();
    xhr.onload = function() { onload(xhr.response); };
    xhr.send(null);
};
Module["run"] = function() {};"""

PROFILES = {"robust": {"mod_scheme": "gmsk"}, "ultrasonic": {"mod_scheme": "ofdm"}}
MEMORY = b"\x00asm\x01\x00\x00\x00\xff"

TEMPLATE = """interface Quiet {
    Module: Record<string, any>;
}

type ProfileName = string;

type Profile = ProfileName | Record<string, any>;
"""

CONFIG: Dict = {
    "sources": {
        "base_url": BASE_URL,
        "binary_suffix": "mem",
        "requirements": {
            "base": "quiet.js",
            "memory": "quiet-emscripten.js.mem",
            "profiles": "quiet-profiles.json",
            "loader": "quiet-emscripten.js",
        },
    },
    "patches": {
        "profiles_anchor": "setProfilesPrefix",
        "read_async_anchor": 'Module["readAsync"]',
        "docs_prefix": "https://quiet.github.io/quiet-js/javascripts/",
    },
    "fetch": {"timeout_s": None},
    "paths": {
        "package_json": "package.json",
        "template": "template.index.d.ts",
        "bundle": "_bundle.js",
        "declarations": "index.d.ts",
    },
}


def artifact_bodies() -> Dict[str, bytes]:
    return {
        BASE_URL + "quiet.js": BASE_JS.encode("utf-8"),
        BASE_URL + "quiet-emscripten.js.mem": MEMORY,
        BASE_URL + "quiet-profiles.json": json.dumps(PROFILES).encode("utf-8"),
        BASE_URL + "quiet-emscripten.js": LOADER_JS.encode("utf-8"),
    }


def make_transport(
    bodies: Dict[str, bytes],
    failing: Dict[str, int] = None,
) -> httpx.MockTransport:
    """Serve ``bodies`` by URL; URLs in ``failing`` answer with that status."""
    failing = failing or {}

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in failing:
            return httpx.Response(failing[url])
        if url not in bodies:
            return httpx.Response(404)
        return httpx.Response(200, content=bodies[url])

    return httpx.MockTransport(handler)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    (tmp_path / "package.json").write_text(json.dumps({"name": "quiet-bundle"}), encoding="utf-8")
    (tmp_path / "template.index.d.ts").write_text(TEMPLATE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(workdir: Path) -> BundleSettings:
    return load_settings(CONFIG, root=workdir)


@pytest.fixture
def transport() -> httpx.MockTransport:
    return make_transport(artifact_bodies())


@pytest.fixture
def log_lines() -> list:
    return []


@pytest.fixture
def log(log_lines: list) -> Callable[[str], None]:
    return log_lines.append
