"""In-memory document store backing search results.

Maps a document id (which doubles as the document's url path) to the title and
body shipped inside the index artifact.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional


@dataclass(slots=True, frozen=True)
class DocumentRecord:
    """A searchable document as shipped in the artifact's document store."""

    id: str
    title: Optional[str] = None
    body: Optional[str] = None


def _text(value: Any) -> Optional[str]:
    # Empty strings are treated as absent, like missing keys
    if value is None:
        return None
    text = str(value)
    return text or None


class DocumentStore:
    """Read-only mapping of document id to `DocumentRecord`."""

    def __init__(self, documents: Iterable[DocumentRecord] = ()) -> None:
        self._docs: Dict[str, DocumentRecord] = {d.id: d for d in documents}

    @classmethod
    def from_artifact(cls, docs: Mapping[str, Mapping[str, Any]]) -> "DocumentStore":
        """Build a store from the artifact's `documentStore.docs` mapping."""
        return cls(
            DocumentRecord(id=str(ref), title=_text(doc.get("title")), body=_text(doc.get("body")))
            for ref, doc in docs.items()
        )

    def get(self, doc_id: str) -> Optional[DocumentRecord]:
        return self._docs.get(doc_id)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._docs

    def __iter__(self) -> Iterator[DocumentRecord]:
        return iter(self._docs.values())

    def __len__(self) -> int:
        return len(self._docs)
