"""Prometheus metrics for verse retrieval.

Remote queries are labelled by ``phase``: ``books`` for discovery of the
matching books of a doc set, ``blocks`` for fetching one book's blocks.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Iterator


REMOTE_QUERY_LATENCY = Histogram(
    "verse_search_remote_query_seconds",
    "Round-trip time of GraphQL queries against the document store",
    ["phase"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

REMOTE_QUERY_ERRORS = Counter(
    "verse_search_remote_query_errors_total",
    "GraphQL queries that failed or returned an unusable response",
    ["phase"],
)

CANDIDATES_EMITTED = Counter(
    "verse_search_candidates_total",
    "Verse candidates rebuilt from block tokens, before local confirmation",
    ["doc_set"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Iterator[None]:
    """Observe the wall time of the block, whether or not it raises."""
    started = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - started)


@contextmanager
def observe_remote_query(phase: str) -> Iterator[None]:
    """Time one remote query and count it as failed if the block raises."""
    with track_latency(REMOTE_QUERY_LATENCY, phase=phase):
        try:
            yield
        except Exception:
            REMOTE_QUERY_ERRORS.labels(phase=phase).inc()
            raise


def get_metrics() -> bytes:
    """Exposition-format dump of the default registry."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
