"""Remote docSet store handle.

The store answers GraphQL queries over a corpus organized as doc sets of
books. Verse providers only depend on the ``DocumentStore`` protocol; the HTTP
implementation below talks to a GraphQL endpoint with httpx.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx


if TYPE_CHECKING:
    from verse_search.config import Settings

logger = logging.getLogger(__name__)


class RetrievalError(RuntimeError):
    """Raised when the remote store cannot answer a query."""


@runtime_checkable
class DocumentStore(Protocol):
    """Async GraphQL query surface of the remote store."""

    async def gql_query(self, query: str) -> dict[str, Any]:  # pragma: no cover - Protocol only
        """Run a GraphQL query and return the decoded response (with its ``data`` key)."""


class HttpDocumentStore:
    """GraphQL-over-HTTP document store.

    Retries, if any, happen in the httpx transport; callers see either a
    decoded response or a ``RetrievalError``.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        retries: int = 0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpDocumentStore:
        return cls(settings.graphql_url, timeout=settings.http_timeout, retries=settings.http_retries)

    async def __aenter__(self) -> HttpDocumentStore:
        """Async context manager entry."""
        if self.client is None:
            self.client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    def _create_client(self) -> httpx.AsyncClient:
        """Create HTTP client with retry configuration."""
        transport = self._transport or httpx.AsyncHTTPTransport(retries=self.retries)
        timeout = httpx.Timeout(self.timeout, connect=10.0)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        return httpx.AsyncClient(transport=transport, timeout=timeout, headers=headers)

    async def gql_query(self, query: str) -> dict[str, Any]:
        if self.client is None:
            self.client = self._create_client()

        try:
            response = await self.client.post(self.url, json={"query": query})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise RetrievalError(f"GraphQL endpoint {self.url} returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RetrievalError(f"GraphQL request to {self.url} failed: {exc}") from exc
        except ValueError as exc:
            raise RetrievalError(f"GraphQL endpoint {self.url} returned a non-JSON body") from exc

        if not isinstance(payload, dict):
            raise RetrievalError(f"GraphQL endpoint {self.url} returned {type(payload).__name__}, expected an object")
        if errors := payload.get("errors"):
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in errors
            )
            raise RetrievalError(f"GraphQL query failed: {messages}")
        return payload
