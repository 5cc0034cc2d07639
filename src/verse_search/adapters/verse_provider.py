"""Verse providers: paginated retrieval of search candidates.

``GraphQLVerseProvider`` walks a doc set one book at a time:

1. Book discovery (first use only): list the doc set's documents that match
   every search word, keep the books, in the store's order.
2. Per book: fetch the matching blocks, flatten their tokens and join token
   payloads sharing a chapter:verse scope into one candidate per verse.

Books are fetched strictly in sequence, and only when the caller asks for
more candidates than are buffered.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from verse_search.adapters.document_store import DocumentStore, RetrievalError
from verse_search.adapters.graphql_models import BlocksResponse, BlockToken, BooksResponse
from verse_search.adapters.graphql_queries import blocks_query, books_query, search_params
from verse_search.domain.search import SearchCandidate, VerseReference
from verse_search.observability.context import bind_doc_set
from verse_search.observability.metrics import CANDIDATES_EMITTED, observe_remote_query
from verse_search.observability.tracing import remote_query_span
from verse_search.search.analyzers import words_of
from verse_search.utils.buffered_reader import BufferedReader


logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

CHAPTER_SCOPE = "chapter/"
VERSES_SCOPE = "verses/"


@runtime_checkable
class VerseProvider(Protocol):
    """Source of search candidates, consumed in caller-sized pages."""

    async def get_verses(self, limit: int = 0) -> list[SearchCandidate]:  # pragma: no cover - Protocol only
        """Return up to ``limit`` further candidates (all remaining when 0); empty once exhausted."""


@dataclass(frozen=True)
class BooksUnresolved:
    """Book list not fetched yet."""


@dataclass
class BooksResolved:
    """Book list fetched; ``cursor`` indexes the next book to visit."""

    books: tuple[str, ...]
    cursor: int = 0

    @property
    def exhausted(self) -> bool:
        return self.cursor >= len(self.books)

    def advance(self) -> str:
        book = self.books[self.cursor]
        self.cursor += 1
        return book


def scope_reference(scopes: Iterable[str]) -> tuple[str | None, str | None]:
    """Extract ``(chapter, verse)`` from a token's scope tags; missing parts are None."""
    chapter: str | None = None
    verse: str | None = None
    for scope in scopes:
        if scope.startswith(CHAPTER_SCOPE):
            chapter = scope.removeprefix(CHAPTER_SCOPE)
        elif scope.startswith(VERSES_SCOPE):
            verse = scope.removeprefix(VERSES_SCOPE)
    return chapter, verse


def chapter_verse_from_scopes(scopes: Iterable[str]) -> str:
    """Get a ``chapter:verse`` (or bare ``chapter``) key from scope tags."""
    chapter, verse = scope_reference(scopes)
    key = chapter or ""
    if verse:
        key += ":" + verse
    return key


class GraphQLVerseProvider:
    """Verse provider backed by a GraphQL docSet store.

    One instance serves one search request and must not be read by more than
    one caller at a time.
    """

    def __init__(
        self,
        store: DocumentStore,
        search_phrase: str,
        whole_words: bool = False,
        ignore: str = "",
        equivalent: Sequence[str] = (),
        *,
        doc_set: str,
        collection: str,
    ) -> None:
        """Initialize the provider.

        Args:
            store: Remote store handle
            search_phrase: Raw phrase; split on whitespace into search words
            whole_words: Require each word to match an entire word token
            ignore: Characters that may appear anywhere inside a match
            equivalent: Equivalence classes of interchangeable characters
            doc_set: Doc set to search
            collection: Collection the doc set belongs to, copied into references
        """
        self.store = store
        self.doc_set = doc_set
        self.collection = collection
        self.words = words_of(search_phrase)
        self.search_is_blank = not self.words
        self.search_params = search_params(self.words, whole_words, ignore, equivalent)
        self.state: BooksUnresolved | BooksResolved = BooksUnresolved()
        self._verse_reader: BufferedReader[SearchCandidate] = BufferedReader(
            read=self.query_next_book,
            done=self._books_done,
        )

    def _books_done(self) -> bool:
        return isinstance(self.state, BooksResolved) and self.state.exhausted

    async def get_verses(self, limit: int = 0) -> list[SearchCandidate]:
        """Return the next ``limit`` candidates, or all remaining ones when ``limit`` is 0."""
        if self.search_is_blank:
            return []
        bind_doc_set(self.doc_set, self.collection)
        await self._ensure_books()
        return await self._verse_reader.read(limit)

    async def query_next_book(self) -> list[SearchCandidate]:
        """Fetch and convert the next unvisited book; empty once every book was visited."""
        books = await self._ensure_books()
        if books.exhausted:
            return []
        return await self.verses_of_book(books.advance())

    async def _ensure_books(self) -> BooksResolved:
        if isinstance(self.state, BooksUnresolved):
            self.state = await self._resolve_books()
        return self.state

    async def _resolve_books(self) -> BooksResolved:
        response = await self._query(
            "books",
            books_query(self.doc_set, self.search_params),
            BooksResponse,
        )
        books = tuple(document.id for document in response.data.doc_set.documents if document.is_book)
        logger.info("Found %d candidate books in doc set %s", len(books), self.doc_set)
        return BooksResolved(books)

    async def verses_of_book(self, book_id: str) -> list[SearchCandidate]:
        response = await self._query("blocks", blocks_query(book_id, self.search_params), BlocksResponse)
        document = response.data.document
        candidates = self.verses_from_tokens(document.tokens(), document.book_code or book_id)
        logger.debug("Book %s yielded %d candidates", book_id, len(candidates))
        CANDIDATES_EMITTED.labels(doc_set=self.doc_set).inc(len(candidates))
        return candidates

    def verses_from_tokens(self, tokens: Iterable[BlockToken], book_code: str) -> list[SearchCandidate]:
        """Join token payloads by chapter and verse, in token order."""
        verse_texts: dict[tuple[str | None, str | None], str] = {}
        for token in tokens:
            key = scope_reference(token.scopes)
            verse_texts[key] = verse_texts.get(key, "") + token.payload

        return [
            SearchCandidate(
                reference=VerseReference(
                    doc_set=self.doc_set,
                    collection=self.collection,
                    book_code=book_code,
                    chapter=chapter,
                    verses=verse,
                ),
                text=text,
            )
            for (chapter, verse), text in verse_texts.items()
        ]

    async def _query(self, phase: str, query: str, response_model: type[ResponseT]) -> ResponseT:
        with remote_query_span(phase, self.doc_set), observe_remote_query(phase):
            try:
                return response_model.model_validate(await self.store.gql_query(query))
            except RetrievalError:
                raise
            except Exception as exc:
                raise RetrievalError(f"{phase} query against doc set {self.doc_set} failed: {exc}") from exc
