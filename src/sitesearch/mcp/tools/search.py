"""Site search tools for FastMCP.

Expose the search pipeline over the index installed in the server state. The
index is loaded once at startup; these tools only read it.
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from fastmcp import FastMCP

from sitesearch.state import SearchState


def _search_state(state_obj: Any) -> SearchState:
    search_state = getattr(state_obj, "search", None)
    if search_state is None:
        raise RuntimeError("Site search is not initialized")
    return search_state


def register_search_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register site search tools on the given FastMCP instance.

    Reads the installed index from state.search (a `SearchState`).
    """

    @mcp.tool
    def site_search(query: str) -> Dict[str, Any]:
        """Search the site index and return render-ready results.

        The response has a `status` of "results", "no_results", "loading",
        "error" or "too_short"; `results` keeps the index's ranking order and
        each result carries title, url, preview_html, path_label and category.
        """
        return _search_state(get_state()).search(query or "").to_dict()

    @mcp.tool
    def site_index_status() -> Dict[str, Any]:
        """Report whether the search index is installed and how many documents it holds."""
        search_state = _search_state(get_state())
        loaded = search_state.loaded
        error = search_state.error
        return {
            "ready": search_state.ready,
            "documents": len(loaded.store) if loaded is not None else 0,
            "fields": list(loaded.index.fields) if loaded is not None else [],
            "error": str(error) if error is not None else None,
        }
