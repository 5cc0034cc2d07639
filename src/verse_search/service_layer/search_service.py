"""Search service orchestration layer.

Wires configuration into verse providers and confirms candidates locally.
The store filters at block granularity, so every verse of a matching block
comes back as a candidate; ``VerseSearch`` keeps only the verses that contain
every search word and reports what each word matched.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
import logging
import re
import unicodedata

from verse_search.adapters.document_store import DocumentStore
from verse_search.adapters.verse_provider import GraphQLVerseProvider, VerseProvider
from verse_search.config import Settings
from verse_search.domain.search import SearchCandidate, VerseMatch
from verse_search.search.analyzers import words_of
from verse_search.search.pattern import PatternOptions, make_regex_pattern


logger = logging.getLogger(__name__)


def _continues_word(text: str, index: int) -> bool:
    """True if ``text[index]`` exists and belongs to a word, combining marks included."""
    if not 0 <= index < len(text):
        return False
    char = text[index]
    return char.isalnum() or char == "_" or unicodedata.category(char).startswith("M")


class VerseSearch:
    """One search request: a provider plus the local word matchers."""

    def __init__(
        self,
        provider: VerseProvider,
        search_phrase: str,
        *,
        whole_words: bool = False,
        ignore: str = "",
        equivalent: Sequence[str] = (),
        batch_size: int = 50,
    ) -> None:
        self.provider = provider
        self.batch_size = batch_size
        self.whole_words = whole_words
        options = PatternOptions(equivalent=tuple(equivalent), ignore=ignore, capture=True)
        self._matchers = [re.compile(make_regex_pattern(word, options)) for word in words_of(search_phrase)]

    def _find(self, matcher: re.Pattern[str], text: str) -> re.Match[str] | None:
        if not self.whole_words:
            return matcher.search(text)
        # A whole word must not touch a letter, digit or combining mark on either side.
        start = 0
        while (found := matcher.search(text, start)) is not None:
            if not _continues_word(text, found.start() - 1) and not _continues_word(text, found.end()):
                return found
            start = found.start() + 1
        return None

    def confirm(self, candidate: SearchCandidate) -> VerseMatch | None:
        """Return a match if every search word occurs in the candidate's text."""
        matches: list[str] = []
        for matcher in self._matchers:
            found = self._find(matcher, candidate.text)
            if found is None:
                return None
            matches.append(found.group(1))
        return VerseMatch(candidate=candidate, matches=matches)

    async def get_results(self, limit: int = 0) -> list[VerseMatch]:
        """Return up to ``limit`` confirmed matches (all remaining when 0)."""
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        if not self._matchers:
            return []

        if limit == 0:
            candidates = await self.provider.get_verses(0)
            return [match for match in map(self.confirm, candidates) if match is not None]

        results: list[VerseMatch] = []
        while len(results) < limit:
            candidates = await self.provider.get_verses(limit - len(results))
            if not candidates:
                break
            confirmed = [match for match in map(self.confirm, candidates) if match is not None]
            logger.debug("Confirmed %d of %d candidates", len(confirmed), len(candidates))
            results.extend(confirmed)
        return results

    async def iter_results(self, batch_size: int | None = None) -> AsyncIterator[VerseMatch]:
        """Yield every confirmed match, pulling ``batch_size`` at a time."""
        size = batch_size or self.batch_size
        while True:
            page = await self.get_results(size)
            for match in page:
                yield match
            if len(page) < size:
                return


class VerseSearchService:
    """High-level search entry point.

    The accent directive from ``settings`` supplies the ignore set and the
    equivalence classes for every search it creates.
    """

    def __init__(self, store: DocumentStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings
        self.search_config = settings.search_config()

    def create_provider(
        self,
        search_phrase: str,
        doc_set: str,
        collection: str,
        whole_words: bool | None = None,
    ) -> GraphQLVerseProvider:
        return GraphQLVerseProvider(
            self.store,
            search_phrase,
            self._whole_words(whole_words),
            self.search_config.ignore,
            self.search_config.equivalent,
            doc_set=doc_set,
            collection=collection,
        )

    def create_query(
        self,
        search_phrase: str,
        doc_set: str,
        collection: str,
        whole_words: bool | None = None,
    ) -> VerseSearch:
        """Create a search request over one doc set."""
        provider = self.create_provider(search_phrase, doc_set, collection, whole_words)
        return VerseSearch(
            provider,
            search_phrase,
            whole_words=self._whole_words(whole_words),
            ignore=self.search_config.ignore,
            equivalent=self.search_config.equivalent,
            batch_size=self.settings.search_batch_size,
        )

    async def search(
        self,
        search_phrase: str,
        doc_set: str,
        collection: str,
        *,
        whole_words: bool | None = None,
        limit: int = 0,
    ) -> list[VerseMatch]:
        """Run a search and return up to ``limit`` matches (all when 0)."""
        query = self.create_query(search_phrase, doc_set, collection, whole_words)
        results = await query.get_results(limit)
        logger.info("Search in %s returned %d matches", doc_set, len(results))
        return results

    def _whole_words(self, whole_words: bool | None) -> bool:
        return self.settings.search_whole_words if whole_words is None else whole_words
