"""Correlation fields shared by every log line of one search.

A search runs as a single asyncio task, so a ``ContextVar`` is enough to
carry the ids and the searched doc set from the provider down to the log
formatter without threading them through call signatures.
"""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("verse_search_trace", default=None)


def _new_ids() -> dict[str, str]:
    return {"trace_id": uuid4().hex, "span_id": uuid4().hex[:16]}


def get_trace_context() -> dict:
    """Return the current fields, minting ids when none are bound yet."""
    current = trace_context.get()
    if current and current.get("trace_id"):
        return current
    current = {**(current or {}), **_new_ids()}
    trace_context.set(current)
    return current


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def _bind(**fields: object) -> None:
    trace_context.set({**get_trace_context(), **fields})


def bind_doc_set(doc_set: str, collection: str | None = None) -> None:
    """Tag later log lines with the doc set (and collection) being searched."""
    if collection is None:
        _bind(doc_set=doc_set)
    else:
        _bind(doc_set=doc_set, collection=collection)


def update_span_id(span_id: str) -> None:
    _bind(span_id=span_id)
