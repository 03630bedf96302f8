"""
Content sources: where raw lesson JSON comes from.

A source has one job, fetching the raw payload stored at a resolved lesson
path. Bundled assets are read from the local content tree; the network source
asks the web server that serves the same tree. FallbackSource chains two
sources so the second is only asked when the first fails.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

import httpx
from loguru import logger

from .errors import FetchError, ParseError

SourceKind = Literal["bundled", "network", "auto"]


@runtime_checkable
class ContentSource(Protocol):
    """Anything that can fetch a raw lesson payload by path."""

    async def fetch(self, path: str) -> Any:
        """Return the parsed JSON stored at path."""
        ...


def parse_json(text: str, origin: str) -> Any:
    """Parse JSON text, raising ParseError that names the origin."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON syntax in {origin}: {e}") from e


class BundledAssetSource:
    """Read lesson JSON from a directory on disk."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def locate(self, path: str) -> Path:
        """Absolute file location of a lesson path, confined to the root."""
        root = self.root.resolve()
        target = (root / path).resolve()
        if not target.is_relative_to(root):
            raise FetchError(path, f"path escapes content root {root}")
        return target

    async def fetch(self, path: str) -> Any:
        target = self.locate(path)
        try:
            text = await asyncio.to_thread(target.read_text, encoding="utf-8-sig")
        except FileNotFoundError as e:
            raise FetchError(path, "not found in bundled content") from e
        except OSError as e:
            raise FetchError(path, str(e)) from e
        return parse_json(text, str(target))

    def __repr__(self) -> str:
        return f"BundledAssetSource({str(self.root)!r})"


class NetworkSource:
    """Fetch lesson JSON over HTTP from the server that hosts the lesson tree."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ):
        """
        Initialize network source.

        Args:
            base_url: URL under which lesson paths are served
            client: Optional shared client (its lifecycle stays with the caller)
            timeout_seconds: Request timeout for a client created here
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def fetch(self, path: str) -> Any:
        url = self.url_for(path)
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(path, f"HTTP {status}: {e.response.reason_phrase}") from e
        except httpx.RequestError as e:
            raise FetchError(path, f"request to {url} failed: {e}") from e
        return parse_json(response.text, url)

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self.client.aclose()

    def __repr__(self) -> str:
        return f"NetworkSource({self.base_url!r})"


class FallbackSource:
    """Try the primary source, then the secondary one, within a single fetch."""

    def __init__(self, primary: ContentSource, secondary: ContentSource):
        self.primary = primary
        self.secondary = secondary

    async def fetch(self, path: str) -> Any:
        try:
            return await self.primary.fetch(path)
        except Exception as e:
            logger.debug(f"{self.primary!r} failed for {path} ({e}), trying {self.secondary!r}")
        return await self.secondary.fetch(path)

    async def aclose(self) -> None:
        for source in (self.primary, self.secondary):
            close = getattr(source, "aclose", None)
            if close is not None:
                await close()

    def __repr__(self) -> str:
        return f"FallbackSource({self.primary!r}, {self.secondary!r})"


def build_content_source(
    kind: SourceKind,
    content_root: Path | str,
    base_url: str,
    timeout_seconds: float = 10.0,
) -> ContentSource:
    """Build the configured source: bundled, network, or bundled-then-network."""
    if kind == "bundled":
        return BundledAssetSource(content_root)
    if kind == "network":
        return NetworkSource(base_url, timeout_seconds=timeout_seconds)
    if kind == "auto":
        return FallbackSource(
            BundledAssetSource(content_root),
            NetworkSource(base_url, timeout_seconds=timeout_seconds),
        )
    raise ValueError(f"Unknown content source: {kind}")
