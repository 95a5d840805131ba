"""The search pipeline: query -> ranked hits -> snippets -> result records.

`run_search` is a pure, synchronous function of (loaded index, query, config).
Every failure mode is turned into a `SearchResponse` status so callers can
render it directly; no exception escapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

from sitesearch.config import SearchConfig
from sitesearch.exceptions import SearchExecutionFailed
from sitesearch.index.loader import LoadedIndex
from sitesearch.index.store import DocumentRecord
from sitesearch.search.executor import execute_search, is_searchable, parse_terms
from sitesearch.search.formatter import ResultRecord, format_result, resolve_title, title_matches
from sitesearch.search.snippets import extract_snippet

logger = structlog.get_logger(__name__)

LOADING_MESSAGE = "Search index is still loading..."
NO_RESULTS_MESSAGE = "No results found"
SEARCH_ERROR_MESSAGE = "An error occurred while searching"
LOAD_ERROR_MESSAGE = "Failed to load search index"


class ResponseStatus(str, Enum):
    RESULTS = "results"
    NO_RESULTS = "no_results"
    LOADING = "loading"
    ERROR = "error"
    TOO_SHORT = "too_short"


@dataclass(slots=True)
class SearchResponse:
    """What the renderer shows for one query: results or a status message."""

    status: ResponseStatus
    query: str = ""
    results: List[ResultRecord] = field(default_factory=list)
    message: Optional[str] = None

    @classmethod
    def load_failed(cls, query: str = "") -> "SearchResponse":
        return cls(ResponseStatus.ERROR, query, message=LOAD_ERROR_MESSAGE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "query": self.query,
            "message": self.message,
            "results": [r.to_dict() for r in self.results],
        }


def build_result(
    document: DocumentRecord, terms: List[str], config: Optional[SearchConfig] = None
) -> ResultRecord:
    """Extract the snippet for one document and format it."""
    cfg = config or SearchConfig()
    matched_title = title_matches(resolve_title(document, cfg), terms)
    snippet = extract_snippet(document.body, terms, cfg)
    return format_result(document, snippet, matched_title, cfg)


def run_search(
    loaded: Optional[LoadedIndex], query: str, config: Optional[SearchConfig] = None
) -> SearchResponse:
    cfg = config or SearchConfig()
    query = query.strip()
    if not is_searchable(query, cfg.min_query_length):
        return SearchResponse(ResponseStatus.TOO_SHORT, query)

    if loaded is None:
        return SearchResponse(ResponseStatus.LOADING, query, message=LOADING_MESSAGE)

    try:
        hits = execute_search(loaded.index, query, cfg)
    except SearchExecutionFailed:
        return SearchResponse(ResponseStatus.ERROR, query, message=SEARCH_ERROR_MESSAGE)

    terms = parse_terms(query)
    results: List[ResultRecord] = []
    for hit in hits:
        document = loaded.store.get(hit.document_id)
        if document is None:
            # Stale postings: the store has no such document
            continue
        results.append(build_result(document, terms, cfg))

    if not results:
        return SearchResponse(ResponseStatus.NO_RESULTS, query, message=NO_RESULTS_MESSAGE)
    logger.debug("search_results_built", query=query, hits=len(hits), results=len(results))
    return SearchResponse(ResponseStatus.RESULTS, query, results=results)
