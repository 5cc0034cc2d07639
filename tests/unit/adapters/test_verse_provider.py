"""Unit tests for GraphQLVerseProvider against an in-memory docSet store."""

from __future__ import annotations

from typing import Any

from prometheus_client import REGISTRY
from pydantic import ValidationError
import pytest

from verse_search.adapters.document_store import DocumentStore, RetrievalError
from verse_search.adapters.graphql_models import BlockToken
from verse_search.adapters.verse_provider import (
    BooksResolved,
    BooksUnresolved,
    GraphQLVerseProvider,
    VerseProvider,
    chapter_verse_from_scopes,
    scope_reference,
)
from verse_search.domain.search import SearchCandidate, VerseReference
from verse_search.observability.context import get_trace_context


def _provider(store, phrase: str, doc_set: str = "LIB", **kwargs: Any) -> GraphQLVerseProvider:
    return GraphQLVerseProvider(store, phrase, doc_set=doc_set, collection="bibles", **kwargs)


def _locations(candidates: list[SearchCandidate]) -> list[str]:
    return [str(candidate.reference) for candidate in candidates]


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.unit
@pytest.mark.asyncio
class TestGetVerses:
    async def test_end_to_end_single_candidate(self, ds1_store):
        provider = _provider(ds1_store, "begin", doc_set="DS1")

        candidates = await provider.get_verses()

        assert candidates == [
            SearchCandidate(
                reference=VerseReference(
                    doc_set="DS1",
                    collection="bibles",
                    book_code="MAT",
                    chapter="1",
                    verses="1",
                ),
                text="In the beginning",
            )
        ]

    @pytest.mark.parametrize("phrase", ["", "   ", "\n\t "])
    async def test_blank_phrase_makes_no_remote_call(self, ds1_store, phrase):
        provider = _provider(ds1_store, phrase, doc_set="DS1")

        assert await provider.get_verses(5) == []
        assert await provider.get_verses() == []
        assert ds1_store.calls == 0

    async def test_non_book_documents_are_skipped(self, library_store):
        candidates = await _provider(library_store, "light").get_verses()

        assert _locations(candidates) == ["GEN 1:3", "psa 119:105"]
        assert library_store.calls == 3
        assert not any('document(id: "glo")' in query for query in library_store.queries)

    async def test_missing_book_code_falls_back_to_document_id(self, library_store):
        candidates = await _provider(library_store, "lamp").get_verses()

        assert [candidate.reference.book_code for candidate in candidates] == ["psa"]

    async def test_every_verse_of_a_matching_block_is_returned(self, library_store):
        candidates = await _provider(library_store, "earth").get_verses()

        assert _locations(candidates) == ["GEN 1", "GEN 1:1", "GEN 1:2"]
        heading = candidates[0]
        assert heading.reference.verses is None
        assert heading.text == "Creation"
        assert candidates[1].text == "In the beginning God created the heaven and the earth."

    async def test_books_are_fetched_lazily(self, library_store):
        provider = _provider(library_store, "be")

        first = await provider.get_verses(1)

        assert _locations(first) == ["GEN 1"]
        assert library_store.calls == 2
        assert isinstance(provider.state, BooksResolved)
        assert provider.state.books == ("gen", "exo")
        assert provider.state.cursor == 1

    async def test_paged_reads_match_single_drain(self, library_store):
        expected = await _provider(library_store, "be").get_verses()

        provider = _provider(library_store, "be")
        paged: list[SearchCandidate] = []
        while page := await provider.get_verses(2):
            assert len(page) <= 2
            paged.extend(page)

        assert paged == expected
        assert _locations(paged) == ["GEN 1", "GEN 1:1", "GEN 1:2", "GEN 1:3", "EXO 3:2"]

    async def test_exhausted_provider_stops_querying(self, library_store):
        provider = _provider(library_store, "light")
        await provider.get_verses()
        calls = library_store.calls

        assert await provider.get_verses(3) == []
        assert library_store.calls == calls

    async def test_whole_words_filter_on_the_server(self, library_store):
        candidates = await _provider(library_store, "be", whole_words=True).get_verses()

        assert _locations(candidates) == ["GEN 1:3"]

    async def test_every_word_must_match(self, library_store):
        candidates = await _provider(library_store, "God light").get_verses()

        assert _locations(candidates) == ["GEN 1:3"]
        assert library_store.calls == 2

    async def test_equivalent_characters_reach_the_server(self, library_store):
        candidates = await _provider(library_store, "tenebres", equivalent=("èeé",)).get_verses()

        assert _locations(candidates) == ["JHN 1:4", "JHN 1:5"]

    async def test_ignored_characters_reach_the_server(self, library_store):
        candidates = await _provider(library_store, "etait", ignore="\N{COMBINING ACUTE ACCENT}").get_verses()

        assert _locations(candidates) == ["JHN 1:4", "JHN 1:5"]

    async def test_binds_doc_set_to_log_context(self, library_store):
        await _provider(library_store, "light").get_verses(1)

        assert get_trace_context()["doc_set"] == "LIB"

    async def test_counts_emitted_candidates(self, ds1_store):
        before = _sample("verse_search_candidates_total", {"doc_set": "DS1"})

        await _provider(ds1_store, "begin", doc_set="DS1").get_verses()

        assert _sample("verse_search_candidates_total", {"doc_set": "DS1"}) == before + 1


@pytest.mark.unit
@pytest.mark.asyncio
class TestFailures:
    async def test_failed_book_is_skipped_on_next_call(self, failing_library_store):
        provider = _provider(failing_library_store, "light")
        before = _sample("verse_search_remote_query_errors_total", {"phase": "blocks"})

        with pytest.raises(RetrievalError, match="gen"):
            await provider.get_verses(1)

        assert _sample("verse_search_remote_query_errors_total", {"phase": "blocks"}) == before + 1
        assert _locations(await provider.get_verses(1)) == ["psa 119:105"]

    async def test_failed_discovery_is_retried(self, library_store):
        library_store.fail_on.add("LIB")
        provider = _provider(library_store, "light")

        with pytest.raises(RetrievalError):
            await provider.get_verses()
        assert isinstance(provider.state, BooksUnresolved)

        library_store.fail_on.clear()
        assert _locations(await provider.get_verses()) == ["GEN 1:3", "psa 119:105"]

    async def test_malformed_response_is_wrapped(self):
        class BrokenStore:
            async def gql_query(self, query: str) -> dict[str, Any]:
                return {"data": {}}

        provider = _provider(BrokenStore(), "light")

        with pytest.raises(RetrievalError, match="books query against doc set LIB failed") as exc_info:
            await provider.get_verses()
        assert isinstance(exc_info.value.__cause__, ValidationError)

    async def test_unexpected_store_error_is_wrapped(self):
        class ExplodingStore:
            async def gql_query(self, query: str) -> dict[str, Any]:
                raise KeyError("data")

        with pytest.raises(RetrievalError) as exc_info:
            await _provider(ExplodingStore(), "light").get_verses()
        assert isinstance(exc_info.value.__cause__, KeyError)


@pytest.mark.unit
class TestScopes:
    def test_chapter_and_verse(self):
        assert chapter_verse_from_scopes(["chapter/3", "verses/16"]) == "3:16"

    def test_chapter_only(self):
        assert chapter_verse_from_scopes(["chapter/3"]) == "3"

    def test_malformed_scopes_use_what_is_present(self):
        assert chapter_verse_from_scopes([]) == ""
        assert chapter_verse_from_scopes(["verses/2"]) == ":2"
        assert scope_reference(["milestone/x", "verses/2-3"]) == (None, "2-3")

    def test_tokens_grouped_by_verse_in_first_seen_order(self, ds1_store):
        provider = _provider(ds1_store, "x", doc_set="DS1")
        tokens = [
            BlockToken(scopes=["chapter/1", "verses/2"], payload="b"),
            BlockToken(scopes=["chapter/1", "verses/1"], payload="a"),
            BlockToken(scopes=["verses/2", "chapter/1"], payload="c"),
            BlockToken(scopes=[], payload="?"),
        ]

        candidates = provider.verses_from_tokens(tokens, "MAT")

        assert [(c.reference.chapter, c.reference.verses, c.text) for c in candidates] == [
            ("1", "2", "bc"),
            ("1", "1", "a"),
            (None, None, "?"),
        ]


@pytest.mark.unit
def test_protocols_are_satisfied(ds1_store):
    assert isinstance(ds1_store, DocumentStore)
    assert isinstance(_provider(ds1_store, "begin", doc_set="DS1"), VerseProvider)
