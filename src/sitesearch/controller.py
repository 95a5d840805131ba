"""Debounced query controller.

Translates input events (keystrokes, Escape, close, outside clicks) into
searches against a `SearchState` and pushes the outcome to a `ResultsView`.
Runs on the asyncio event loop; the debounce timer is a single
`loop.call_later` handle that every qualifying keystroke replaces, so only the
last query of a burst is searched.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional, Protocol

import structlog

from sitesearch.config import SearchConfig
from sitesearch.exceptions import StateError
from sitesearch.search.pipeline import SearchResponse
from sitesearch.state import SearchState

logger = structlog.get_logger(__name__)

ESCAPE_KEY = "Escape"


class ControllerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    DISPLAYING = "displaying"


class Region(str, Enum):
    """Page region a click landed in."""

    INPUT = "input"
    RESULTS = "results"
    MODAL = "modal"
    OUTSIDE = "outside"


class ResultsView(Protocol):
    """Render sink owned by the host page."""

    def render(self, response: SearchResponse) -> None: ...

    def clear(self) -> None: ...


class SearchController:
    """Debounce state machine between the input field and a `ResultsView`.

    Events must arrive on the thread running the event loop. Pass `loop` when
    the host calls in from synchronous code; otherwise the running loop is
    used and `on_input` raises `StateError` when there is none.
    """

    def __init__(
        self,
        search_state: SearchState,
        view: ResultsView,
        config: Optional[SearchConfig] = None,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._search_state = search_state
        self._view = view
        self._config = config or search_state.settings.search
        self._loop = loop
        self._timer: Optional[asyncio.TimerHandle] = None
        self.state = ControllerState.IDLE
        self.text = ""  # current content of the input field
        self.searches_executed = 0
        self.last_response: Optional[SearchResponse] = None

    # ----- Events -----

    def on_input(self, text: str) -> None:
        """Handle a change of the input field."""
        self.text = text
        if len(text.strip()) < self._config.min_query_length:
            self._reset(clear_input=False)
            return
        self._cancel_timer()
        loop = self._event_loop()
        self._timer = loop.call_later(self._config.debounce_ms / 1000, self._fire)
        self.state = ControllerState.PENDING

    def on_focus(self) -> None:
        # Focusing an empty input never opens the results
        if not self.text.strip():
            self._reset(clear_input=False)

    def on_keydown(self, key: str) -> None:
        if key == ESCAPE_KEY:
            self._reset(clear_input=True)

    def on_close(self) -> None:
        self._reset(clear_input=True)

    def on_click(self, region: Region) -> None:
        if region is Region.OUTSIDE:
            self._reset(clear_input=True)

    def shutdown(self) -> None:
        self._cancel_timer()

    # ----- Internals -----

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise StateError(
                "SearchController must be driven from a running event loop or be given one"
            ) from exc

    def _fire(self) -> None:
        self._timer = None
        query = self.text.strip()
        response = self._search_state.search(query)
        self.searches_executed += 1
        self.last_response = response
        logger.debug("debounced_search", query=query, status=response.status.value)
        self._view.render(response)
        self.state = ControllerState.DISPLAYING

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reset(self, *, clear_input: bool) -> None:
        self._cancel_timer()
        if clear_input:
            self.text = ""
        self._view.clear()
        self.state = ControllerState.IDLE
