"""sitesearch MCP server entrypoint using FastMCP.

Loads the site's search index once and exposes the search pipeline as tools.
Run with:
  - sitesearch-mcp
  - or: python -m sitesearch.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import asyncio
from typing import Optional

from fastmcp import FastMCP

from sitesearch.config import Settings, load_settings
from sitesearch.log import configure_logging
from sitesearch.mcp.tools import register_search_tools
from sitesearch.state import SearchState


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.search = SearchState(settings)

    async def init_index(self) -> bool:
        """Load the configured index artifact into the search state."""
        return await self.search.load()


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("sitesearch MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    configure_logging(settings.app.log_level, json=settings.app.json_logs)
    _state = AppState(settings)
    # Load failures are recorded on the state and reported by the tools
    asyncio.run(_state.init_index())
    register_search_tools(mcp, get_state=lambda: _state)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
