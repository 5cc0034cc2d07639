"""Domain layer - value objects with no infrastructure dependencies.

Contains the references and candidates exchanged between verse providers and
the search service.
"""

from verse_search.domain.search import SearchCandidate, VerseMatch, VerseReference


__all__ = [
    "SearchCandidate",
    "VerseMatch",
    "VerseReference",
]
