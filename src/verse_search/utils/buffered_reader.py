"""Pull-based buffer between a batch producer and a count-based consumer."""

from __future__ import annotations

from collections import deque
from collections.abc import Awaitable, Callable, Sequence
import logging
from typing import Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class BufferedReader(Generic[T]):
    """Serve arbitrary item counts from a producer that yields batches.

    The producer is only awaited while the buffer is short of the requested
    count and ``done()`` is false; it is never called again once ``done()``
    reports exhaustion. Items come out in the order the producer yielded them.

    One consumer at a time: overlapping ``read`` calls raise ``RuntimeError``.
    """

    def __init__(
        self,
        read: Callable[[], Awaitable[Sequence[T]]],
        done: Callable[[], bool],
    ) -> None:
        """Initialize the reader.

        Args:
            read: Coroutine function producing the next batch (possibly empty)
            done: Predicate that is true once the producer is exhausted
        """
        self._read = read
        self._done = done
        self._buffer: deque[T] = deque()
        self._reading = False

    async def read(self, limit: int = 0) -> list[T]:
        """Return up to ``limit`` items, or everything left when ``limit`` is 0."""
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        if self._reading:
            raise RuntimeError("BufferedReader.read() does not support overlapping calls")

        self._reading = True
        try:
            await self._fill(limit)
        finally:
            self._reading = False

        count = len(self._buffer) if limit == 0 else min(limit, len(self._buffer))
        return [self._buffer.popleft() for _ in range(count)]

    async def _fill(self, limit: int) -> None:
        batches = 0
        while (limit == 0 or len(self._buffer) < limit) and not self._done():
            batch = await self._read()
            self._buffer.extend(batch)
            batches += 1
        if batches:
            logger.debug("Pulled %d batches, %d items buffered", batches, len(self._buffer))
