"""Service layer - orchestrates providers and pattern matching.

Following Cosmic Python Chapter 4: the service layer is the entry point
used by the CLI; it depends on adapter protocols, not implementations.
"""

from .search_service import VerseSearch, VerseSearchService


__all__ = [
    "VerseSearch",
    "VerseSearchService",
]
