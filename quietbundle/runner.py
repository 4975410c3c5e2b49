"""CLI runner that fetches quiet-js and writes the offline bundle."""

from __future__ import annotations

import argparse
import asyncio
import enum
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from .assemble import assemble_bundle
from .config import load_config
from .declarations import render_declarations
from .errors import ConfigError, WriteFailure
from .fetch import FetchedRequirements, fetch_requirements
from .profiles import extract_profile_names, read_display_name
from .settings import BundleSettings, load_settings

FINISHED_MESSAGE = "Finished ! Module ready to use !"


class Stage(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    BUNDLING = "bundling"
    DECLGEN = "declgen"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


_NEXT_STAGE = {
    Stage.IDLE: Stage.FETCHING,
    Stage.FETCHING: Stage.BUNDLING,
    Stage.BUNDLING: Stage.DECLGEN,
    Stage.DECLGEN: Stage.WRITING,
    Stage.WRITING: Stage.DONE,
}


@dataclass(frozen=True)
class BundleResult:
    """Summary of a successful pipeline run."""
    bundle_path: Path
    declarations_path: Path
    profile_names: List[str]
    bundle_bytes: int
    elapsed_s: float


def _format_duration(seconds: float) -> str:
    """Format elapsed seconds into a compact, human-readable string."""
    if seconds < 0:
        seconds = 0.0
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes)}m{secs:04.1f}s"


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise WriteFailure(path, str(e)) from e


class BundlePipeline:
    """Runs fetch -> bundle -> declarations -> write, strictly in sequence."""

    def __init__(
        self,
        settings: BundleSettings,
        *,
        log: Optional[Callable[[str], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.stage = Stage.IDLE
        self._log = log or (lambda _msg: None)

    def _advance(self) -> None:
        self.stage = _NEXT_STAGE[self.stage]
        self._log(f"[STAGE] {self.stage.value}")

    async def run(self) -> BundleResult:
        if self.stage is not Stage.IDLE:
            raise RuntimeError(f"Pipeline already ran (stage={self.stage.value})")
        started = time.perf_counter()
        try:
            result = await self._run(started)
        except BaseException as e:
            self.stage = Stage.FAILED
            self._log(f"[ERROR] {type(e).__name__}: {e}")
            raise
        return result

    async def _run(self, started: float) -> BundleResult:
        s = self.settings

        self._advance()
        self._log("Downloading requirements...")
        fetched: FetchedRequirements = await fetch_requirements(
            s.requirements, timeout_s=s.timeout_s, transport=self.transport, log=self._log
        )

        self._advance()
        self._log("Bundling...")
        bundle_text = assemble_bundle(fetched, s)
        self._log(f"[BUNDLE] memory={len(fetched.memory)} bytes bundle={len(bundle_text)} chars")

        self._advance()
        names = extract_profile_names(fetched.profiles)
        catalog_name = s.requirement("profiles").url.rsplit("/", 1)[-1]
        self._log(
            f"[DTS] {len(names)} profiles names found in '{catalog_name}', "
            f"creating '{s.declarations_path.name}'"
        )
        try:
            template = s.template.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f'Failed to read declaration template "{s.template}": {e}') from e
        declarations_text = render_declarations(template, names)

        self._advance()
        _write_text(s.declarations_path, declarations_text)
        self._log(f"[OK] wrote {s.declarations_path}")
        _write_text(s.bundle_path, bundle_text)
        self._log(f"[OK] wrote {s.bundle_path}")

        self._advance()
        elapsed = time.perf_counter() - started
        self._log(f"[TIME] total={_format_duration(elapsed)}")
        return BundleResult(
            bundle_path=s.bundle_path,
            declarations_path=s.declarations_path,
            profile_names=names,
            bundle_bytes=len(bundle_text.encode("utf-8")),
            elapsed_s=elapsed,
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and build the bundle."""
    ap = argparse.ArgumentParser(description="Bundle quiet-js into a self-contained offline module")
    ap.add_argument("--config", default=None, help="Path to bundle.yaml (default: $QUIET_BUNDLE_CONFIG or repo default)")
    ap.add_argument("--out", default=".", help="Directory that relative input/output paths resolve against")
    ap.add_argument("--base-url", default=None, help="Override sources.base_url")
    ap.add_argument("--template", default=None, help="Override paths.template")
    ap.add_argument("--package-json", default=None, help="Override paths.package_json")
    ap.add_argument("--timeout", type=float, default=None, help="HTTP timeout seconds (default: none)")
    ap.add_argument("--run-log", default=None, help="Append log lines to this file")
    args = ap.parse_args(argv)

    run_log_path: Optional[Path] = Path(args.run_log).expanduser().resolve() if args.run_log else None
    prefix = ""

    def _append_log(line: str) -> None:
        if run_log_path is None:
            return
        run_log_path.parent.mkdir(parents=True, exist_ok=True)
        with run_log_path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    def _log(msg: str, *, stderr: bool = False) -> None:
        line = f"{prefix}{msg}"
        stream = sys.stderr if stderr or msg.startswith("[ERROR]") else sys.stdout
        print(line, file=stream)
        _append_log(line)

    if args.timeout is not None and args.timeout <= 0:
        _log("[ERROR] --timeout must be > 0", stderr=True)
        return 2

    root = Path(args.out).expanduser().resolve()
    try:
        config = load_config(args.config)
        settings = load_settings(
            config,
            root=root,
            base_url=args.base_url,
            template=args.template,
            package_json=args.package_json,
            timeout_s=args.timeout,
        )
        prefix = f"[{read_display_name(settings.package_json)}] "
    except ConfigError as e:
        _log(f"[ERROR] {type(e).__name__}: {e}", stderr=True)
        raise

    _append_log(f"[RUN] start {time.strftime('%Y-%m-%d %H:%M:%S')}")
    asyncio.run(BundlePipeline(settings, log=_log).run())
    _log(FINISHED_MESSAGE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
