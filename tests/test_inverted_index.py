import math

import pytest

from conftest import C_POST, LONG_TOKEN, TOKENS_POST
from sitesearch.index.loader import LoadedIndex

TIPS = "/blog/2021-01-05-python-tips/"
RUST = "/blog/2020-rust-ownership-notes/"
ABOUT = "/about/"


def ids(hits):
    return [h.document_id for h in hits]


def test_ranks_title_and_body_matches_above_body_only(loaded_index: LoadedIndex) -> None:
    hits = loaded_index.index.search("python")
    assert ids(hits) == [TIPS, ABOUT]
    assert hits[0].score > hits[1].score > 0


def test_ordering_is_deterministic(loaded_index: LoadedIndex) -> None:
    first = loaded_index.index.search("rust")
    second = loaded_index.index.search("rust")
    assert ids(first) == ids(second)
    assert set(ids(first)) == {RUST, ABOUT}


def test_query_is_stemmed_like_the_index(loaded_index: LoadedIndex) -> None:
    assert ids(loaded_index.index.search("borrowed")) == [RUST]


def test_idf_matches_elasticlunr_formula(loaded_index: LoadedIndex) -> None:
    index = loaded_index.index
    assert index.doc_count == 3
    assert index.doc_freq("title", "python") == 1
    assert index.idf("title", "python") == pytest.approx(1 + math.log(3 / 2))
    assert index.doc_freq("body", "nothing") == 0


def test_and_mode_requires_every_token(loaded_index: LoadedIndex) -> None:
    assert set(ids(loaded_index.index.search("python rust"))) == {TIPS, RUST, ABOUT}
    assert ids(loaded_index.index.search("python rust", boolean="AND")) == [ABOUT]


def test_prefix_expansion(loaded_index: LoadedIndex) -> None:
    index = loaded_index.index
    assert index.search("pyth") == []
    assert index.expand_token("title", "pyth") == ["python"]
    assert set(ids(index.search("pyth", expand=True))) == {TIPS, ABOUT}


def test_field_boosts_restrict_fields(loaded_index: LoadedIndex) -> None:
    assert ids(loaded_index.index.search("python", fields={"title": 1.0})) == [TIPS]
    assert loaded_index.index.search("python", fields={"missing": 1.0}) == []


@pytest.mark.parametrize("query", ["", "the", "and of to"])
def test_empty_and_stopword_queries_return_nothing(loaded_index: LoadedIndex, query: str) -> None:
    assert loaded_index.index.search(query) == []


def test_unknown_term_returns_nothing(loaded_index: LoadedIndex) -> None:
    assert loaded_index.index.search("zzz") == []


# ---------- Dumps produced by elasticlunr.js ----------


def test_query_tokens_follow_elasticlunr_pipeline(elasticlunr_index: LoadedIndex) -> None:
    # Single characters survive, hyphens split, edges are trimmed, lunr stop words drop
    assert elasticlunr_index.index.tokenize("About the C-language!") == ["c", "languag"]


def test_single_character_token_is_searchable(elasticlunr_index: LoadedIndex) -> None:
    hits = elasticlunr_index.index.search("c program")
    assert ids(hits) == [C_POST]
    assert ids(elasticlunr_index.index.search("C", fields={"title": 1.0})) == [C_POST]


def test_lunr_stop_words_do_not_block_and_queries(elasticlunr_index: LoadedIndex) -> None:
    assert ids(elasticlunr_index.index.search("about python", boolean="AND")) == [TOKENS_POST]


def test_long_token_is_searchable(elasticlunr_index: LoadedIndex) -> None:
    assert ids(elasticlunr_index.index.search(LONG_TOKEN)) == [TOKENS_POST]
    assert elasticlunr_index.index.expand_token("body", LONG_TOKEN[:5]) == [LONG_TOKEN]
