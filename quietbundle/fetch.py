"""Concurrent download of the remote bundle requirements."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

import httpx

from .errors import IncompleteFetch, RetrievalFailure
from .settings import Requirement

Content = Union[str, bytes]


@dataclass(frozen=True)
class FetchedRequirements:
    """Downloaded artifacts, one field per requirement key."""
    base: str
    memory: bytes
    profiles: str
    loader: str

    @classmethod
    def from_contents(cls, contents: Dict[str, Content]) -> "FetchedRequirements":
        """Build the record, checking every key resolved to the expected type."""
        expected = {"base": str, "memory": bytes, "profiles": str, "loader": str}
        for key, kind in expected.items():
            if key not in contents:
                raise IncompleteFetch(key, "requirement was not fetched")
            if not isinstance(contents[key], kind):
                raise IncompleteFetch(
                    key, f"expected {kind.__name__}, got {type(contents[key]).__name__}"
                )
        return cls(
            base=contents["base"],  # type: ignore[arg-type]
            memory=contents["memory"],  # type: ignore[arg-type]
            profiles=contents["profiles"],  # type: ignore[arg-type]
            loader=contents["loader"],  # type: ignore[arg-type]
        )


async def _fetch_one(client: httpx.AsyncClient, req: Requirement) -> Content:
    """GET one requirement and decode it as bytes or text."""
    try:
        r = await client.get(req.url)
        r.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise RetrievalFailure(req.key, req.url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise RetrievalFailure(req.key, req.url, f"{type(e).__name__}: {e}") from e
    return r.content if req.binary else r.text


async def download_requirements(
    requirements: List[Requirement],
    *,
    timeout_s: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    log: Optional[Callable[[str], None]] = None,
) -> Dict[str, Content]:
    """Download every requirement concurrently and return key -> content.

    All requests are launched together and joined. The first failure cancels
    the remaining requests and propagates as ``RetrievalFailure``.
    """
    total = len(requirements)
    done = 0
    if log is not None:
        log(f"[FETCH] start n={total}")

    async def _task(client: httpx.AsyncClient, req: Requirement) -> Content:
        nonlocal done
        content = await _fetch_one(client, req)
        done += 1
        if log is not None:
            pct = 100 * done // total if total else 100
            log(f"[FETCH] {done}/{total} {pct}% {req.key} {req.url}")
        return content

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_s),
        transport=transport,
        follow_redirects=True,
    ) as client:
        tasks = [asyncio.ensure_future(_task(client, req)) for req in requirements]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    return {req.key: content for req, content in zip(requirements, results)}


async def fetch_requirements(
    requirements: List[Requirement],
    *,
    timeout_s: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    log: Optional[Callable[[str], None]] = None,
) -> FetchedRequirements:
    """Download the requirement set and return it as a typed record."""
    contents = await download_requirements(
        requirements, timeout_s=timeout_s, transport=transport, log=log
    )
    return FetchedRequirements.from_contents(contents)
