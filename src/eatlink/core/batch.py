"""Batch aggregation state shared by fetch tasks and the flush loop.

Fetch tasks append result lines concurrently; only the scheduler drains. Both
operations run under one lock and never perform I/O while holding it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from eatlink.core.models import Batch, ReplyTarget


@dataclass
class BatchState:
    """Work seen since the last flush.

    ``reply_target`` is None exactly when ``result_lines`` is empty.
    """

    reply_target: Optional[ReplyTarget] = None
    result_lines: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return self.reply_target is None


class BatchAggregator:
    """Lock-guarded owner of the single BatchState instance."""

    def __init__(self) -> None:
        self._state = BatchState()
        self._lock = asyncio.Lock()

    async def append(self, target: ReplyTarget, line: str) -> None:
        """Add one result line; the first appender of a batch picks the reply target."""

        async with self._lock:
            if self._state.reply_target is None:
                self._state.reply_target = target
            self._state.result_lines.append(line)

    async def drain(self) -> Optional[Batch]:
        """Take the current batch and reset the state, or return None if empty."""

        async with self._lock:
            if self._state.is_empty():
                return None
            batch = Batch(
                target=self._state.reply_target,
                lines=tuple(self._state.result_lines),
            )
            self._state = BatchState()
        return batch

    def snapshot(self) -> BatchState:
        return BatchState(
            reply_target=self._state.reply_target,
            result_lines=list(self._state.result_lines),
        )
