"""Parsing and validation of the serialized search index artifact.

Static-site generators ship the index either as bare JSON or as a JavaScript
assignment (``window.searchIndex = {...};``). Both forms are accepted; the JSON
payload follows the elasticlunr layout and is validated with pydantic.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from sitesearch.exceptions import IndexMalformed

_ASSIGNMENT_RE = re.compile(r"^(?:(?:var|let|const)\s+)?[A-Za-z_$][\w$.]*\s*=\s*")


class DocumentStoreModel(BaseModel):
    """The artifact's embedded document store."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    docs: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    doc_info: Dict[str, Dict[str, float]] = Field(default_factory=dict, alias="docInfo")
    length: int = 0
    save: bool = True


class FieldIndexModel(BaseModel):
    """Per-field postings stored as a character trie."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    trie: Dict[str, Any] = Field(alias="root")


class IndexArtifact(BaseModel):
    """Validated shape of an elasticlunr index dump."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: Optional[str] = None
    fields: List[str]
    ref: str
    pipeline: List[str] = Field(default_factory=list)
    document_store: DocumentStoreModel = Field(alias="documentStore")
    index: Dict[str, FieldIndexModel]

    @model_validator(mode="after")
    def _fields_are_indexed(self) -> "IndexArtifact":
        missing = [f for f in self.fields if f not in self.index]
        if missing:
            raise ValueError(f"fields without postings: {', '.join(missing)}")
        return self


def unwrap_payload(text: str) -> str:
    """Return the JSON object embedded in `text`, dropping any JS assignment."""
    payload = text.lstrip("\ufeff").strip()
    match = _ASSIGNMENT_RE.match(payload)
    if match:
        payload = payload[match.end() :].rstrip()
        if payload.endswith(";"):
            payload = payload[:-1].rstrip()
    return payload


def parse_artifact(text: str) -> IndexArtifact:
    """Parse artifact text into an `IndexArtifact`.

    Raises `IndexMalformed` when the payload is not JSON or lacks the index
    structure (fields, ref, documentStore, index).
    """
    payload = unwrap_payload(text)
    if not payload:
        raise IndexMalformed("Search index artifact is empty")
    # The trie nests one object per character of the longest token, deeper
    # than pydantic-core's JSON parser allows; decode with json first
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise IndexMalformed(f"Search index artifact is not valid JSON: {exc}") from exc
    try:
        return IndexArtifact.model_validate(data)
    except ValidationError as exc:
        raise IndexMalformed(f"Search index artifact is malformed: {exc.error_count()} error(s)") from exc
