import json
import math
from collections import Counter
from typing import Any, Dict, List, Sequence

import pytest

from sitesearch.index.inverted import elasticlunr_analyzer
from sitesearch.index.loader import LoadedIndex, materialize


def build_artifact(
    docs: List[Dict[str, Any]], fields: Sequence[str] = ("title", "body"), ref: str = "id"
) -> Dict[str, Any]:
    """Build a small elasticlunr-layout index dump for tests."""
    analyzer = elasticlunr_analyzer()
    index: Dict[str, Any] = {f: {"root": {"docs": {}, "df": 0}} for f in fields}
    doc_info: Dict[str, Dict[str, int]] = {}
    for doc in docs:
        doc_id = doc[ref]
        doc_info[doc_id] = {}
        for f in fields:
            tokens = [t.text for t in analyzer(doc.get(f) or "")]
            doc_info[doc_id][f] = len(tokens)
            for token, count in Counter(tokens).items():
                node = index[f]["root"]
                for ch in token:
                    node = node.setdefault(ch, {"docs": {}, "df": 0})
                node["docs"][doc_id] = {"tf": math.sqrt(count)}
                node["df"] = len(node["docs"])
    return {
        "version": "0.9.5",
        "fields": list(fields),
        "ref": ref,
        "pipeline": ["trimmer", "stopWordFilter", "stemmer"],
        "documentStore": {
            "docs": {d[ref]: d for d in docs},
            "docInfo": doc_info,
            "length": len(docs),
            "save": True,
        },
        "index": index,
    }


def as_script(artifact: Dict[str, Any]) -> str:
    return "window.searchIndex = " + json.dumps(artifact) + ";"


SAMPLE_DOCS: List[Dict[str, Any]] = [
    {
        "id": "/blog/2021-01-05-python-tips/",
        "title": "Python Tips",
        "body": "Python is a language. Tips for writing python code that reads well.",
    },
    {
        "id": "/blog/2020-rust-ownership-notes/",
        "body": "Rust notes about ownership, borrowing and lifetimes.",
    },
    {
        "id": "/about/",
        "body": "I am a developer who writes Python and Rust.",
    },
]


# ---------- Dump written the way elasticlunr.js serializes it ----------

C_POST = "/posts/2022-c-programming/"
TOKENS_POST = "/posts/2021-python-tokens/"
LONG_TOKEN = "0123456789" * 30


def trie(postings: Dict[str, Dict[str, float]]) -> Dict[str, Any]:
    """Character trie for `{token: {ref: tf}}`, one nested node per character."""
    root: Dict[str, Any] = {"docs": {}, "df": 0}
    for token, docs in postings.items():
        node = root
        for ch in token:
            node = node.setdefault(ch, {"docs": {}, "df": 0})
        node["docs"] = {ref: {"tf": tf} for ref, tf in docs.items()}
        node["df"] = len(docs)
    return root


def elasticlunr_dump() -> Dict[str, Any]:
    """Index dump as elasticlunr 0.9.5 emits it for two posts.

    Postings are spelled out by hand from elasticlunr's own pipeline (split on
    whitespace and hyphens, trim, lunr stop words, Porter stemmer) rather than
    derived from this package's analyzer.
    """
    return {
        "version": "0.9.5",
        "fields": ["title", "body"],
        "ref": "id",
        "pipeline": ["trimmer", "stopWordFilter", "stemmer"],
        "documentStore": {
            "docs": {
                C_POST: {
                    "id": C_POST,
                    "title": "C Programming",
                    "body": "Notes on the C language and programming in C.",
                },
                TOKENS_POST: {
                    "id": TOKENS_POST,
                    "title": "Python Tokens",
                    "body": "About python and a long token " + LONG_TOKEN,
                },
            },
            "docInfo": {
                C_POST: {"title": 2, "body": 5},
                TOKENS_POST: {"title": 2, "body": 4},
            },
            "length": 2,
            "save": True,
        },
        "index": {
            "title": {
                "root": trie(
                    {
                        "c": {C_POST: 1},
                        "program": {C_POST: 1},
                        "python": {TOKENS_POST: 1},
                        "token": {TOKENS_POST: 1},
                    }
                )
            },
            "body": {
                "root": trie(
                    {
                        "note": {C_POST: 1},
                        "c": {C_POST: math.sqrt(2)},
                        "languag": {C_POST: 1},
                        "program": {C_POST: 1},
                        "python": {TOKENS_POST: 1},
                        "long": {TOKENS_POST: 1},
                        "token": {TOKENS_POST: 1},
                        LONG_TOKEN: {TOKENS_POST: 1},
                    }
                )
            },
        },
    }


@pytest.fixture
def sample_artifact() -> Dict[str, Any]:
    return build_artifact(SAMPLE_DOCS)


@pytest.fixture
def loaded_index(sample_artifact: Dict[str, Any]) -> LoadedIndex:
    return materialize(as_script(sample_artifact))


@pytest.fixture
def elasticlunr_index() -> LoadedIndex:
    return materialize(as_script(elasticlunr_dump()))
