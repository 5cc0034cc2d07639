"""Shared test fixtures and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
import re
from typing import Any

import pytest

from verse_search.adapters.document_store import RetrievalError


# Complete test environment that overrides ALL possible config values
TEST_ENV = {
    "GRAPHQL_URL": "http://graphql.test/graphql",
    "HTTP_TIMEOUT": "5",
    "HTTP_RETRIES": "0",
    "SEARCH_ACCENTS_TO_REMOVE": "",
    "SEARCH_WHOLE_WORDS": "false",
    "SEARCH_BATCH_SIZE": "2",
    "LOG_LEVEL": "debug",
    "LOG_JSON": "false",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset configuration environment variables before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


# Word, punctuation and whitespace tokens, the way the store splits text.
# Combining marks stay inside their word.
_TOKEN_PATTERN = re.compile(r"[^\s.,:;!?]+|[.,:;!?]+|\s+")
_MATCHING_CHARS = re.compile(r"withMatchingChars: (\[.*\]) allChars", re.DOTALL)
_DOC_SET_ID = re.compile(r'docSet\(id: "([^"]*)"\)')
_DOCUMENT_ID = re.compile(r'document\(id: "([^"]*)"\)')


def verse_tokens(chapter: str, verse: str | None, text: str) -> list[dict[str, Any]]:
    """Token stream for one verse; ``verse=None`` tags the text with the chapter only."""
    scopes = [f"chapter/{chapter}"]
    if verse is not None:
        scopes.append(f"verses/{verse}")
    return [{"scopes": scopes, "payload": part} for part in _TOKEN_PATTERN.findall(text)]


@dataclass
class FakeDocument:
    id: str
    book_code: str | None
    blocks: list[list[dict[str, Any]]]
    type: str = "book"

    def tokens(self) -> list[dict[str, Any]]:
        return [token for block in self.blocks for token in block]


@dataclass
class FakeGraphQLStore:
    """In-memory docSet store answering the discovery and block queries.

    Like the real store, a document or block passes the filter when every
    pattern matches at least one of its token payloads.
    """

    doc_sets: dict[str, list[FakeDocument]]
    fail_on: set[str] = field(default_factory=set)
    queries: list[str] = field(default_factory=list)

    @property
    def calls(self) -> int:
        return len(self.queries)

    async def __aenter__(self) -> FakeGraphQLStore:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def gql_query(self, query: str) -> dict[str, Any]:
        self.queries.append(query)
        patterns = self._patterns(query)

        if match := _DOC_SET_ID.search(query):
            if match.group(1) in self.fail_on:
                raise RetrievalError(f"doc set {match.group(1)} unavailable")
            documents = [
                {"id": document.id, "idParts": {"type": document.type}}
                for document in self.doc_sets.get(match.group(1), [])
                if _all_match(patterns, document.tokens())
            ]
            return {"data": {"docSet": {"documents": documents}}}

        match = _DOCUMENT_ID.search(query)
        assert match is not None, query
        if match.group(1) in self.fail_on:
            raise RetrievalError(f"document {match.group(1)} unavailable")
        document = self._document(match.group(1))
        blocks = [{"tokens": block} for block in document.blocks if _all_match(patterns, block)]
        return {"data": {"document": {"bookCode": document.book_code, "mainSequence": {"blocks": blocks}}}}

    def _document(self, document_id: str) -> FakeDocument:
        for documents in self.doc_sets.values():
            for document in documents:
                if document.id == document_id:
                    return document
        raise RetrievalError(f"unknown document {document_id}")

    @staticmethod
    def _patterns(query: str) -> list[re.Pattern[str]]:
        match = _MATCHING_CHARS.search(query)
        assert match is not None, query
        # GraphQL string escapes used in the queries are valid JSON
        return [re.compile(pattern) for pattern in json.loads(match.group(1))]


def _all_match(patterns: list[re.Pattern[str]], tokens: list[dict[str, Any]]) -> bool:
    return all(any(pattern.search(token["payload"]) for token in tokens) for pattern in patterns)


def library_doc_sets() -> dict[str, list[FakeDocument]]:
    return {
        "LIB": [
            FakeDocument(
                "gen",
                "GEN",
                [
                    verse_tokens("1", None, "Creation")
                    + verse_tokens("1", "1", "In the beginning God created the heaven and the earth.")
                    + verse_tokens("1", "2", "And the earth was without form."),
                    verse_tokens("1", "3", "And God said, Let there be light: and there was light."),
                ],
            ),
            FakeDocument("glo", None, [verse_tokens("1", "1", "light beginning earth be God")], type="glossary"),
            FakeDocument(
                "exo",
                "EXO",
                [
                    verse_tokens("2", "1", "And there went a man of the house of Levi."),
                    verse_tokens("3", "2", "And he looked, and, behold, the bush burned with fire."),
                ],
            ),
            FakeDocument(
                "psa",
                None,
                [verse_tokens("119", "105", "Thy word is a lamp unto my feet, and a light unto my path.")],
            ),
            FakeDocument(
                "jhn",
                "JHN",
                [
                    verse_tokens("1", "4", "En elle e\u0301tait la vie")
                    + verse_tokens("1", "5", "Et la lumière luit dans les ténèbres"),
                ],
            ),
        ]
    }


@pytest.fixture
def ds1_store() -> FakeGraphQLStore:
    """Doc set DS1: MAT holds a single matching token, MRK nothing relevant."""
    return FakeGraphQLStore(
        {
            "DS1": [
                FakeDocument(
                    "ds1-mat",
                    "MAT",
                    [[{"scopes": ["chapter/1", "verses/1"], "payload": "In the beginning"}]],
                ),
                FakeDocument("ds1-mrk", "MRK", [verse_tokens("1", "1", "The voice of one crying")]),
            ]
        }
    )


@pytest.fixture
def library_store() -> FakeGraphQLStore:
    """Doc set LIB: several books, a glossary and accented text."""
    return FakeGraphQLStore(library_doc_sets())


@pytest.fixture
def failing_library_store() -> FakeGraphQLStore:
    """Doc set LIB where fetching the GEN book fails."""
    return FakeGraphQLStore(library_doc_sets(), fail_on={"gen"})
