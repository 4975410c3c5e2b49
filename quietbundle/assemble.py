"""Compose the self-contained bundle module."""

from __future__ import annotations

import json
from typing import List

from .fetch import FetchedRequirements
from .literal import bytes_to_literal
from .replace import replace_function_body
from .settings import BundleSettings

STATEMENT_SEPARATOR = ";\n"
EXPORT_NAME = "Quiet"


def _js_string(text: str) -> str:
    """Quote text as a JavaScript string literal."""
    return json.dumps(text, ensure_ascii=False)


def bundle_statements(fetched: FetchedRequirements, settings: BundleSettings) -> List[str]:
    """Return the bundle statements in emission order."""
    # Profiles are handed to the callback directly instead of fetched at runtime.
    base = replace_function_body(
        fetched.base,
        settings.profiles_anchor,
        f"onProfilesFetch({_js_string(fetched.profiles)})",
    )
    # readAsync is only used for the memory image, which is embedded as `mem`.
    loader = replace_function_body(fetched.loader, settings.read_async_anchor, "onload(mem);")
    prefix = settings.docs_prefix.replace("\\", "\\\\").replace("'", "\\'")
    return [
        f"let mem={bytes_to_literal(fetched.memory)}",
        base,
        f"{EXPORT_NAME}.init({{profilesPrefix: '{prefix}', memoryInitializerPrefix: '{prefix}'}})",
        loader,
        f"{EXPORT_NAME}.Module=Module",
        f"module.exports={EXPORT_NAME}",
    ]


def assemble_bundle(fetched: FetchedRequirements, settings: BundleSettings) -> str:
    """Build the bundle document text."""
    return STATEMENT_SEPARATOR.join(bundle_statements(fetched, settings))
