"""Adapters layer - remote store handles and verse providers.

Following Cosmic Python Chapter 2: Repository Pattern
The search service depends on the ``VerseProvider`` and ``DocumentStore``
protocols; concrete implementations are chosen at construction.
"""

from .document_store import DocumentStore, HttpDocumentStore, RetrievalError
from .verse_provider import GraphQLVerseProvider, VerseProvider


__all__ = [
    "DocumentStore",
    "GraphQLVerseProvider",
    "HttpDocumentStore",
    "RetrievalError",
    "VerseProvider",
]
