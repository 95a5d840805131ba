"""Snippet extraction: pick the best excerpt of a document body and highlight terms.

The body is first normalized (punctuation replaced by spaces, whitespace
collapsed). The excerpt is anchored on an exact term occurrence; when the
query matches nowhere exactly, a sliding window picks the region containing the
most distinct terms. Excerpts are taken from the normalized text, so original
punctuation and formatting never reach the preview.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sitesearch.config import SearchConfig

# ASCII classes: non-ASCII letters are treated like punctuation
_NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(slots=True, frozen=True)
class Snippet:
    """Highlighted excerpt of a document body.

    Attributes
    ----------
    html: str
        Excerpt text with highlight markup and ellipses applied.
    matched: bool
        True if the excerpt is anchored on a query term occurrence.
    start: int
        Offset of the excerpt in the normalized body, or -1 when the excerpt
        was not anchored on a match.
    """

    html: str
    matched: bool
    start: int = -1


def normalize_body(body: str) -> str:
    """Strip punctuation, collapse whitespace and trim."""
    return _WHITESPACE_RE.sub(" ", _NON_WORD_RE.sub(" ", body)).strip()


def find_anchor(text: str, terms: List[str], *, window_size: int = 200, step: int = 20) -> int:
    """Return the offset the excerpt should be anchored on, or -1.

    `text` and `terms` must already be lower-cased. Every term with an exact
    occurrence overwrites the anchor, so the last matching term in query order
    wins. Only without any exact occurrence are fixed windows scanned.
    """
    anchor = -1
    for term in terms:
        pos = text.find(term)
        if pos != -1:
            anchor = pos
    if anchor != -1:
        return anchor

    distinct = list(dict.fromkeys(terms))
    best = 0
    for i in range(0, len(text) - window_size, step):
        window = text[i : i + window_size]
        count = sum(1 for term in distinct if term in window)
        if count > best:
            best = count
            anchor = i
    return anchor


def highlight(text: str, terms: Iterable[str], css_class: str) -> str:
    """Wrap every case-insensitive occurrence of each term in a <mark> element.

    Terms are applied one after another, so a later term can match inside the
    markup inserted for an earlier one.
    """
    for term in terms:
        if not term:
            continue
        pattern = re.compile(f"({re.escape(term)})", re.IGNORECASE)
        text = pattern.sub(lambda m: f'<mark class="{css_class}">{m.group(1)}</mark>', text)
    return text


def extract_snippet(
    body: Optional[str], terms: Iterable[str], config: Optional[SearchConfig] = None
) -> Snippet:
    """Build the highlighted excerpt of `body` for the given query terms."""
    cfg = config or SearchConfig()
    if not body:
        return Snippet(html=cfg.no_preview_text, matched=False)

    words = [t.lower() for t in terms if t]
    clean = normalize_body(body)
    anchor = find_anchor(clean.lower(), words, window_size=cfg.window_size, step=cfg.window_step)
    if anchor == -1:
        return Snippet(html=clean[: cfg.window_size] + cfg.ellipsis, matched=False)

    start = max(0, anchor - cfg.context_chars)
    excerpt = highlight(clean[start : start + cfg.window_size], words, cfg.highlight_class)
    if start > 0:
        excerpt = cfg.ellipsis + excerpt
    if start + cfg.window_size < len(clean):
        excerpt += cfg.ellipsis
    return Snippet(html=excerpt, matched=True, start=start)
