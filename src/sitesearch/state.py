"""Initialize-once holder for the installed index and document store.

The loader writes the index exactly once; afterwards it is only read. Callers
check `ready` (or use `require()`) instead of assuming a successful load.
"""

from __future__ import annotations

from typing import Optional

import httpx
import structlog

from sitesearch.config import Settings
from sitesearch.exceptions import IndexLoadError, IndexNotReady, StateError
from sitesearch.index.loader import LoadedIndex, load_index
from sitesearch.search.pipeline import SearchResponse, run_search

logger = structlog.get_logger(__name__)


class SearchState:
    """Search index installed for the lifetime of the process."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self._loaded: Optional[LoadedIndex] = None
        self._error: Optional[IndexLoadError] = None

    @property
    def ready(self) -> bool:
        return self._loaded is not None

    @property
    def error(self) -> Optional[IndexLoadError]:
        """The load failure, if loading was attempted and failed."""
        return self._error

    @property
    def loaded(self) -> Optional[LoadedIndex]:
        return self._loaded

    def require(self) -> LoadedIndex:
        if self._loaded is None:
            raise IndexNotReady("Search index is not loaded yet")
        return self._loaded

    def install(self, loaded: LoadedIndex) -> None:
        """Install `loaded` as the process-wide index. Allowed once."""
        if self._loaded is not None:
            raise StateError("A search index is already installed")
        self._loaded = loaded
        self._error = None

    async def load(
        self, source: Optional[str] = None, *, client: Optional[httpx.AsyncClient] = None
    ) -> bool:
        """Load and install the index; record the failure instead of raising.

        Returns True on success. Raises `StateError` if an index is already
        installed.
        """
        if self._loaded is not None:
            raise StateError("A search index is already installed")
        try:
            loaded = await load_index(source, config=self.settings.index, client=client)
        except IndexLoadError as exc:
            logger.error(
                "search_index_load_failed",
                source=source or self.settings.index.url,
                kind=type(exc).__name__,
                error=str(exc),
            )
            self._error = exc
            return False
        self.install(loaded)
        return True

    def search(self, query: str) -> SearchResponse:
        """Run the pipeline against the installed index."""
        if self._error is not None and self._loaded is None:
            return SearchResponse.load_failed(query.strip())
        return run_search(self._loaded, query, self.settings.search)
