"""Logging, tracing and metrics for verse retrieval."""

from verse_search.observability.context import bind_doc_set, get_trace_context, set_trace_context, trace_context
from verse_search.observability.logging import JsonFormatter, configure_logging
from verse_search.observability.metrics import (
    CANDIDATES_EMITTED,
    REMOTE_QUERY_ERRORS,
    REMOTE_QUERY_LATENCY,
    get_metrics,
    get_metrics_content_type,
    observe_remote_query,
    track_latency,
)
from verse_search.observability.tracing import create_span, get_tracer, init_tracing, remote_query_span


__all__ = [
    "CANDIDATES_EMITTED",
    "REMOTE_QUERY_ERRORS",
    "REMOTE_QUERY_LATENCY",
    "JsonFormatter",
    "bind_doc_set",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "observe_remote_query",
    "remote_query_span",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
