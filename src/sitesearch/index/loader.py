"""Index loader: fetch the serialized artifact and materialize a searchable index.

The artifact is retrieved over HTTP with httpx (or read from disk for local
paths), parsed, and turned into an `InvertedIndex` plus a `DocumentStore`.
Nothing is returned unless every step succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin, urlparse
from urllib.request import url2pathname

import httpx
import structlog

from sitesearch.config import IndexConfig
from sitesearch.exceptions import IndexFetchFailed
from sitesearch.index.artifact import parse_artifact
from sitesearch.index.inverted import InvertedIndex
from sitesearch.index.store import DocumentStore

logger = structlog.get_logger(__name__)


@dataclass(slots=True, frozen=True)
class LoadedIndex:
    """A searchable index together with the documents it refers to."""

    index: InvertedIndex
    store: DocumentStore


def resolve_source(source: str, base_url: Optional[str] = None) -> str:
    """Resolve `source` against `base_url` unless it is already absolute."""
    parsed = urlparse(source)
    if parsed.scheme in ("http", "https", "file"):
        return source
    if base_url:
        return urljoin(base_url, source)
    return source


def materialize(text: str) -> LoadedIndex:
    """Parse artifact text and build the index and document store."""
    artifact = parse_artifact(text)
    return LoadedIndex(
        index=InvertedIndex.from_artifact(artifact),
        store=DocumentStore.from_artifact(artifact.document_store.docs),
    )


async def _fetch_http(client: httpx.AsyncClient, url: str) -> str:
    try:
        resp = await client.get(url)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise IndexFetchFailed(
            f"Search index request to {url} returned HTTP {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise IndexFetchFailed(f"Search index request to {url} failed: {exc}") from exc
    return resp.text


def _read_file(location: str) -> str:
    parsed = urlparse(location)
    path = Path(url2pathname(parsed.path)) if parsed.scheme == "file" else Path(location)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IndexFetchFailed(f"Could not read search index from {path}: {exc}") from exc


async def fetch_artifact_text(
    source: str,
    *,
    config: Optional[IndexConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Return the raw artifact text for `source`.

    Raises `IndexFetchFailed` on network errors, timeouts, non-2xx responses and
    unreadable files.
    """
    cfg = config or IndexConfig()
    location = resolve_source(source, cfg.base_url)
    if urlparse(location).scheme not in ("http", "https"):
        return _read_file(location)

    if client is not None:
        return await _fetch_http(client, location)
    headers = {"User-Agent": cfg.user_agent}
    async with httpx.AsyncClient(
        timeout=cfg.timeout, headers=headers, follow_redirects=True
    ) as own_client:
        return await _fetch_http(own_client, location)


async def load_index(
    source: Optional[str] = None,
    *,
    config: Optional[IndexConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> LoadedIndex:
    """Fetch and materialize the index artifact at `source` (default: `config.url`).

    Raises `IndexFetchFailed` or `IndexMalformed`; never returns a partial index.
    """
    cfg = config or IndexConfig()
    source = source or cfg.url
    if not source:
        raise IndexFetchFailed("No search index source configured")

    text = await fetch_artifact_text(source, config=cfg, client=client)
    loaded = materialize(text)
    logger.info(
        "search_index_loaded",
        source=source,
        documents=len(loaded.store),
        fields=loaded.index.fields,
    )
    return loaded
