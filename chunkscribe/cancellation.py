"""
chunkscribe.cancellation - One-shot cancellation token for a pipeline run.

The token is passed explicitly to every segment submission. Cancelling it
aborts the segment task currently bound to it and makes every later
boundary check fail, so no further segment is sent.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager

from chunkscribe.exceptions import Cancelled


class CancellationToken:
    """Cancellation shared by all segment requests of one run."""

    def __init__(self) -> None:
        self._cancelled = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Further calls have no effect."""
        if self._cancelled:
            return
        self._cancelled = True
        for task in list(self._tasks):
            if not task.done():
                task.cancel()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise Cancelled("Run was cancelled")

    @contextmanager
    def bind(self, task: asyncio.Task) -> Iterator[asyncio.Task]:
        """Register an in-flight task so that ``cancel()`` aborts it."""
        if self._cancelled:
            task.cancel()
        self._tasks.add(task)
        try:
            yield task
        finally:
            self._tasks.discard(task)
