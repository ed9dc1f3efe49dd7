"""Chunked, strictly sequential bulk writes."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from tunebridge.domain.value_objects import StepResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CHUNK_SIZE = 100


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into ordered chunks of at most `size`."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


@dataclass(frozen=True)
class BatchOutcome(Generic[T]):
    """What happened to one chunk."""

    items: list[T]
    result: StepResult[None]


# Hey future me - chunks go out ONE AFTER ANOTHER, never gathered! Upstream quotas are per
# minute and a parallel burst of add-items calls is the fastest way to get 429s. A failing
# chunk is recorded and the next chunk still gets its turn.
class BatchWriter(Generic[T]):
    """Issue a bulk-write callable once per chunk."""

    def __init__(
        self,
        write_chunk: Callable[[list[T]], Awaitable[None]],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._write_chunk = write_chunk
        self.chunk_size = chunk_size

    async def write(self, items: Sequence[T]) -> list[BatchOutcome[T]]:
        """Write all items; returns one outcome per chunk in order."""
        outcomes: list[BatchOutcome[T]] = []
        for index, chunk in enumerate(chunked(items, self.chunk_size)):
            try:
                await self._write_chunk(chunk)
            except Exception as e:
                logger.warning(
                    "Bulk write of chunk %d (%d items) failed: %s",
                    index,
                    len(chunk),
                    e,
                )
                outcomes.append(
                    BatchOutcome(chunk, StepResult.failed(str(e), step="write"))
                )
                continue
            outcomes.append(BatchOutcome(chunk, StepResult.ok(step="write")))
        return outcomes
