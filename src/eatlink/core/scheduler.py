"""Debounce scheduler: the single loop that decides when to flush.

The loop races the next queued message against the quiet-period deadline.
Messages are handed to the dispatcher; when the deadline passes, whatever the
fetch tasks have appended so far is sent as one reply.

Reply order inside a batch follows lock acquisition, which is completion
order of the fetches and not necessarily arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from eatlink.core.batch import BatchAggregator
from eatlink.core.config import BatchConfig
from eatlink.core.dispatcher import IngestionDispatcher
from eatlink.core.models import Batch
from eatlink.core.ports import ReplierPort

LOGGER = logging.getLogger(__name__)


class DebounceScheduler:
    """Consumes the ingestion queue and flushes the batch after a quiet period."""

    def __init__(
        self,
        dispatcher: IngestionDispatcher,
        aggregator: BatchAggregator,
        replier: ReplierPort,
        config: BatchConfig,
    ) -> None:
        self._dispatcher = dispatcher
        self._aggregator = aggregator
        self._replier = replier
        self._config = config
        self._sends: set[asyncio.Task] = set()

    async def run(self) -> None:
        """Run until cancelled. Nothing is flushed on the way out."""

        LOGGER.info("Start consumer loop")
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._config.quiet_period
        # Time the first message of the current batch was dequeued.
        batch_started: Optional[float] = None
        try:
            while True:
                timeout = max(0.0, deadline - loop.time())
                try:
                    message = await asyncio.wait_for(self._dispatcher.receive(), timeout)
                except asyncio.TimeoutError:
                    await self.flush()
                    batch_started = None
                    deadline = loop.time() + self._config.quiet_period
                    continue

                LOGGER.info("Received message: %s", message.message_id)
                self._dispatcher.dispatch(message)
                now = loop.time()
                if batch_started is None:
                    batch_started = now
                if self._config.reset_on_activity:
                    deadline = min(
                        now + self._config.quiet_period,
                        batch_started + self._config.max_wait,
                    )
        finally:
            for task in list(self._sends):
                task.cancel()

    async def flush(self) -> bool:
        """Drain the pending batch and send it in the background.

        Returns True when a batch was drained. The loop never waits on the
        reply, so a slow or retrying send does not hold up the queue.
        """

        batch = await self._aggregator.drain()
        if batch is None:
            return False
        task = asyncio.ensure_future(self._send(batch))
        self._sends.add(task)
        task.add_done_callback(self._sends.discard)
        return True

    async def wait_sent(self) -> None:
        """Wait until every reply handed off by ``flush`` has finished."""

        while self._sends:
            await asyncio.gather(*list(self._sends), return_exceptions=True)

    async def _send(self, batch: Batch) -> None:
        attempts = self._config.send_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await self._replier.send_reply(
                    batch.target.chat_id,
                    batch.target.message_id,
                    batch.text,
                )
            except Exception:
                if attempt == attempts:
                    LOGGER.error(
                        "Dropping batch reply for chat %s after %s attempts: %r",
                        batch.target.chat_id,
                        attempts,
                        batch.text,
                        exc_info=True,
                    )
                    return
                delay = self._config.send_backoff * (2 ** (attempt - 1))
                LOGGER.warning(
                    "Reply to chat %s failed (attempt %s/%s), retrying in %.1fs",
                    batch.target.chat_id,
                    attempt,
                    attempts,
                    delay,
                )
                await asyncio.sleep(delay)
                continue

            LOGGER.info("Replied statistics message: %s", batch.text)
            return
