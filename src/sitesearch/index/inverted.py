"""Ranked search over a pre-built elasticlunr inverted index.

The index is consumed exactly as serialized: each field holds a character trie
whose nodes carry postings (``docs``: ref -> ``{"tf": ...}``) and a document
frequency (``df``). Query text goes through a Whoosh analyzer assembled to
mirror elasticlunr's pipeline (split on whitespace and hyphens, trim, stop-word
filter, Porter stemmer) so query tokens line up with the index vocabulary.

Scoring follows elasticlunr: per field, ``tf * idf * 1/sqrt(field_length)``
summed over query tokens, scaled by the coordination factor (matched tokens /
query tokens) and the field boost, then summed across fields.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional

from whoosh.analysis import (
    Filter,
    LowercaseFilter,
    RegexTokenizer,
    StemFilter,
    StopFilter,
)

from sitesearch.index.artifact import IndexArtifact

BooleanMode = Literal["OR", "AND"]

# Keys of a trie node that are not child characters
_NODE_META = frozenset({"docs", "df"})

# Score multiplier applied to prefix-expanded terms
_EXPANSION_PENALTY = 0.15

_EDGE_NON_WORD_RE = re.compile(r"^\W+|\W+$")

# elasticlunr's default stop-word filter list
ELASTICLUNR_STOP_WORDS = frozenset(
    """
    a able about across after all almost also am among an and any are as at be
    because been but by can cannot could dear did do does either else ever every
    for from get got had has have he her hers him his how however i if in into is
    it its just least let like likely may me might most must my neither no nor not
    of off often on only or other our own rather said say says she should since so
    some than that the their them then there these they this tis to too twas us
    wants was we were what when where which while who whom why will with would yet
    you your
    """.split()
)


class TrimFilter(Filter):
    """Strip non-word characters from both ends of each token; drop empty tokens."""

    def __call__(self, tokens):
        for t in tokens:
            t.text = _EDGE_NON_WORD_RE.sub("", t.text)
            if t.text:
                yield t


def elasticlunr_analyzer():
    """Whoosh analyzer reproducing the elasticlunr indexing pipeline.

    Splits on whitespace and hyphens, lower-cases, trims, removes elasticlunr's
    stop words (single characters are kept) and applies the Porter stemmer.
    """
    return (
        RegexTokenizer(r"[^\s\-]+")
        | LowercaseFilter()
        | TrimFilter()
        | StopFilter(stoplist=ELASTICLUNR_STOP_WORDS, minsize=1)
        | StemFilter()
    )


@dataclass(slots=True, frozen=True)
class SearchHit:
    """Represents a single ranked hit."""

    document_id: str
    score: float


class InvertedIndex:
    """Read-only searchable view over the artifact's postings."""

    def __init__(
        self,
        *,
        fields: List[str],
        ref: str,
        tries: Mapping[str, Mapping[str, Any]],
        doc_info: Mapping[str, Mapping[str, float]],
        doc_count: int,
    ) -> None:
        self.fields = list(fields)
        self.ref = ref
        self._tries = tries
        self._doc_info = doc_info
        self.doc_count = doc_count
        self._analyzer = elasticlunr_analyzer()

    @classmethod
    def from_artifact(cls, artifact: IndexArtifact) -> "InvertedIndex":
        store = artifact.document_store
        return cls(
            fields=artifact.fields,
            ref=artifact.ref,
            tries={name: f.trie for name, f in artifact.index.items()},
            doc_info=store.doc_info,
            # Older dumps omit `length`; fall back to the number of docInfo rows
            doc_count=store.length or len(store.doc_info),
        )

    # ----- Vocabulary access -----

    def tokenize(self, text: str) -> List[str]:
        """Run `text` through the same pipeline elasticlunr used to build the index."""
        return [t.text for t in self._analyzer(text)]

    def _node(self, field: str, token: str) -> Optional[Mapping[str, Any]]:
        node: Optional[Mapping[str, Any]] = self._tries.get(field)
        if node is None or not token:
            return None
        for ch in token:
            node = node.get(ch)
            if node is None:
                return None
        return node

    def get_docs(self, field: str, token: str) -> Mapping[str, Mapping[str, Any]]:
        node = self._node(field, token)
        if node is None:
            return {}
        return node.get("docs") or {}

    def doc_freq(self, field: str, token: str) -> int:
        node = self._node(field, token)
        if node is None:
            return 0
        return int(node.get("df") or 0)

    def idf(self, field: str, token: str) -> float:
        return 1 + math.log(self.doc_count / (self.doc_freq(field, token) + 1))

    def field_length(self, doc_id: str, field: str) -> float:
        return float((self._doc_info.get(doc_id) or {}).get(field) or 0)

    def expand_token(self, field: str, token: str) -> List[str]:
        """Return every indexed term in `field` that starts with `token`."""
        root = self._node(field, token)
        if root is None:
            return []
        out: List[str] = []

        def walk(prefix: str, node: Mapping[str, Any]) -> None:
            if (node.get("df") or 0) > 0:
                out.append(prefix)
            for key, child in node.items():
                if key in _NODE_META:
                    continue
                walk(prefix + key, child)

        walk(token, root)
        return out

    # ----- Search -----

    def search(
        self,
        query: str,
        *,
        fields: Optional[Mapping[str, float]] = None,
        boolean: BooleanMode = "OR",
        expand: bool = False,
    ) -> List[SearchHit]:
        """Execute a search query and return hits ordered by descending score.

        `fields` maps field name to boost; unknown fields are ignored and an
        omitted mapping searches every field with boost 1. Ties keep the order
        in which documents were first scored.
        """
        if not query or self.doc_count <= 0:
            return []
        tokens = self.tokenize(query)
        if not tokens:
            return []

        boosts = dict(fields) if fields else {f: 1.0 for f in self.fields}
        totals: Dict[str, float] = {}
        for field, boost in boosts.items():
            if field not in self._tries or boost == 0:
                continue
            for doc_id, score in self._field_search(tokens, field, boolean, expand).items():
                totals[doc_id] = totals.get(doc_id, 0.0) + score * boost

        hits = [SearchHit(document_id=doc_id, score=score) for doc_id, score in totals.items()]
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits

    def _field_search(
        self, tokens: List[str], field: str, boolean: BooleanMode, expand: bool
    ) -> Dict[str, float]:
        scores: Optional[Dict[str, float]] = None
        doc_tokens: Dict[str, List[str]] = {}

        for token in tokens:
            keys = self.expand_token(field, token) if expand else [token]
            token_scores: Dict[str, float] = {}
            for key in keys:
                docs = self.get_docs(field, key)
                idf = self.idf(field, key)
                if scores is not None and boolean == "AND":
                    docs = {ref: docs[ref] for ref in scores if ref in docs}
                if key == token:
                    for ref in docs:
                        doc_tokens.setdefault(ref, []).append(key)
                penalty = 1.0
                if key != token:
                    penalty = (1 - (len(key) - len(token)) / len(key)) * _EXPANSION_PENALTY
                for ref, posting in docs.items():
                    tf = float(posting.get("tf") or 0)
                    length = self.field_length(ref, field)
                    norm = 1 / math.sqrt(length) if length else 1.0
                    token_scores[ref] = token_scores.get(ref, 0.0) + tf * idf * norm * penalty
            scores = _merge_scores(scores, token_scores, boolean)

        return _coord_norm(scores or {}, doc_tokens, len(tokens))


def _merge_scores(
    accum: Optional[Dict[str, float]], scores: Dict[str, float], boolean: BooleanMode
) -> Dict[str, float]:
    if accum is None:
        return scores
    if boolean == "AND":
        return {ref: accum[ref] + s for ref, s in scores.items() if ref in accum}
    for ref, s in scores.items():
        accum[ref] = accum.get(ref, 0.0) + s
    return accum


def _coord_norm(
    scores: Dict[str, float], doc_tokens: Mapping[str, List[str]], query_len: int
) -> Dict[str, float]:
    for ref in scores:
        matched = doc_tokens.get(ref)
        if matched:
            scores[ref] = scores[ref] * len(matched) / query_len
    return scores
