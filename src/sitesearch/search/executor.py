"""Query executor: delegate ranking to the installed index."""

from __future__ import annotations

from typing import List, Optional

import structlog

from sitesearch.config import SearchConfig
from sitesearch.exceptions import IndexNotReady, SearchExecutionFailed
from sitesearch.index.inverted import InvertedIndex, SearchHit

logger = structlog.get_logger(__name__)


def parse_terms(query: str) -> List[str]:
    """Split a query into lower-cased, whitespace-delimited terms."""
    return query.strip().lower().split()


def is_searchable(query: str, min_length: int) -> bool:
    """True when the trimmed query is long enough to run a search."""
    return len(query.strip()) >= min_length


def execute_search(
    index: Optional[InvertedIndex], query: str, config: Optional[SearchConfig] = None
) -> List[SearchHit]:
    """Rank documents for `query` using the index's native scoring.

    Raises `IndexNotReady` when no index is installed and
    `SearchExecutionFailed` when the index search itself fails.
    """
    if index is None:
        raise IndexNotReady("Search index is not loaded yet")
    cfg = config or SearchConfig()
    try:
        hits = index.search(
            query,
            fields=cfg.field_boosts or None,
            boolean=cfg.boolean,
            expand=cfg.expand,
        )
    except Exception as exc:
        logger.error("search_failed", query=query, error=repr(exc))
        raise SearchExecutionFailed(f"Search failed for query {query!r}") from exc
    logger.debug("search_executed", query=query, hits=len(hits))
    return hits
