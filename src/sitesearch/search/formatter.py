"""Turn a document and its snippet into a render-ready result record.

Document ids double as url paths. When a document has no explicit title one is
derived from the id, which is expected to follow the slug convention
``<prefix>-<words>-<separated>-<by>-<hyphens>``: the last non-empty path
segment, minus its leading prefix token(s) (a date or ordinal), title-cased.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from sitesearch.config import SearchConfig
from sitesearch.index.store import DocumentRecord
from sitesearch.search.snippets import Snippet

_WORD_START_RE = re.compile(r"(^|\s)(\S)")
_WHITESPACE_RE = re.compile(r"\s+")

HOME_LABEL = "Home"


class ResultCategory(str, Enum):
    """How strongly a result matched; used by the renderer for styling."""

    PRIMARY = "primary"  # query matched the title
    SECONDARY = "secondary"  # query matched the body
    TERTIARY = "tertiary"


@dataclass(slots=True, frozen=True)
class ResultRecord:
    """A single render-ready search result."""

    title: str
    url: str
    preview_html: str
    path_label: str
    category: ResultCategory

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "preview_html": self.preview_html,
            "path_label": self.path_label,
            "category": self.category.value,
        }


def path_label(doc_id: str) -> str:
    """Strip one leading and one trailing slash; "Home" for the site root."""
    label = doc_id[1:] if doc_id.startswith("/") else doc_id
    if label.endswith("/"):
        label = label[:-1]
    return label or HOME_LABEL


def capitalize_words(text: str) -> str:
    return _WORD_START_RE.sub(lambda m: m.group(1) + m.group(2).upper(), text)


def derive_title(doc_id: str, prefix_tokens: int = 1) -> str:
    """Derive a display title from a slug-style document id.

    >>> derive_title("/blog/2021-python-packaging-notes/")
    'Python Packaging Notes'
    """
    segments = [s for s in doc_id.split("/") if s]
    if not segments:
        return ""
    words = segments[-1].split("-")[max(0, prefix_tokens) :]
    return capitalize_words(" ".join(words))


def resolve_title(document: DocumentRecord, config: Optional[SearchConfig] = None) -> str:
    cfg = config or SearchConfig()
    if document.title:
        return document.title
    special = cfg.special_titles.get(document.id)
    if special:
        return special
    return derive_title(document.id, cfg.slug_prefix_tokens) or path_label(document.id)


def title_matches(title: str, terms: Iterable[str]) -> bool:
    """True if any query term occurs in the title (case-insensitive)."""
    lowered = title.lower()
    return bool(title) and any(term.lower() in lowered for term in terms if term)


def categorize(title_matched: bool, body_matched: bool) -> ResultCategory:
    if title_matched:
        return ResultCategory.PRIMARY
    if body_matched:
        return ResultCategory.SECONDARY
    return ResultCategory.TERTIARY


def preview(
    document: DocumentRecord, snippet: Optional[Snippet], config: Optional[SearchConfig] = None
) -> str:
    """Snippet html when available, else a plain truncation of the body."""
    cfg = config or SearchConfig()
    if snippet is not None and snippet.html:
        return snippet.html
    if document.body:
        collapsed = html.escape(_WHITESPACE_RE.sub(" ", document.body).strip(), quote=False)
        if len(collapsed) > cfg.window_size:
            return collapsed[: cfg.window_size] + cfg.ellipsis
        return collapsed
    return cfg.no_preview_text


def format_result(
    document: DocumentRecord,
    snippet: Optional[Snippet],
    title_matched: bool,
    config: Optional[SearchConfig] = None,
) -> ResultRecord:
    cfg = config or SearchConfig()
    return ResultRecord(
        title=resolve_title(document, cfg),
        url=document.id,
        preview_html=preview(document, snippet, cfg),
        path_label=path_label(document.id),
        category=categorize(title_matched, snippet is not None and snippet.matched),
    )
