"""OpenTelemetry spans around remote store queries.

The CLI installs no exporter: spans only leave the process when an embedding
application (or a test) adds a span processor to the provider returned by
:func:`init_tracing`. Until then the API's no-op tracer is used.
"""

from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from verse_search.observability.context import update_span_id


if TYPE_CHECKING:
    from collections.abc import Iterator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

TRACER_NAME = "verse_search"

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = "verse-search",
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider as the global one and return it."""
    resource = Resource.create({"service.name": service_name, **(resource_attributes or {})})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer(TRACER_NAME)
    logger.info("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    tracer = _tracer_holder["tracer"]
    if tracer is None:
        tracer = _tracer_holder["tracer"] = trace.get_tracer(TRACER_NAME)
    return tracer


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    """Run the block inside a new current span.

    The span id becomes the ``span_id`` of log lines written inside the block.
    An exception escaping the block is recorded on the span, which is then
    marked as failed, and re-raised.
    """
    with get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        span_context = span.get_span_context()
        if span_context.is_valid:
            update_span_id(trace.format_span_id(span_context.span_id))
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            raise


def remote_query_span(phase: str, doc_set: str) -> AbstractContextManager[Span]:
    """Client span named ``docset.query.<phase>`` for one GraphQL round trip."""
    return create_span(
        f"docset.query.{phase}",
        kind=SpanKind.CLIENT,
        attributes={"docset.id": doc_set, "docset.query.phase": phase},
    )
