"""Ingestion dispatcher.

Inbound messages pass through a bounded queue so bursts are absorbed without
blocking the Telegram update handler. Each dequeued message gets its own task
that fetches the media and appends the result to the shared batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional

from eatlink.core.batch import BatchAggregator
from eatlink.core.config import BatchConfig
from eatlink.core.errors import QueueFull
from eatlink.core.media_group import MediaGroupCache
from eatlink.core.models import InboundMessage, ReplyTarget
from eatlink.core.ports import MediaFetcherPort, PersisterPort

LOGGER = logging.getLogger(__name__)


class IngestionDispatcher:
    """Owns the inbound queue and the per-message fetch tasks."""

    def __init__(
        self,
        fetcher: MediaFetcherPort,
        persister: PersisterPort,
        aggregator: BatchAggregator,
        config: BatchConfig,
        media_groups: Optional[MediaGroupCache] = None,
    ) -> None:
        self._fetcher = fetcher
        self._persister = persister
        self._aggregator = aggregator
        self._media_groups = media_groups
        self._queue: asyncio.Queue[InboundMessage] = asyncio.Queue(maxsize=config.queue_capacity)
        self._tasks: set[asyncio.Task] = set()

    def submit(self, message: InboundMessage) -> None:
        """Enqueue without waiting; raise QueueFull when at capacity."""

        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull as e:
            raise QueueFull(f"Ingestion queue full, message {message.message_id} rejected") from e

    async def receive(self) -> InboundMessage:
        return await self._queue.get()

    def dispatch(self, message: InboundMessage) -> None:
        """Start the fetch-and-append work for one message in the background."""

        LOGGER.debug("Spawn to handle message %s", message.message_id)
        self._spawn(self._handle(message))

    async def wait_idle(self) -> None:
        """Wait until every in-flight fetch and persist task has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        # Strong reference until done so the task is not garbage collected.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle(self, message: InboundMessage) -> None:
        LOGGER.info("Handling message: %s", message.message_id)
        await self._record_media_group(message)

        try:
            result = await self._fetcher.fetch(message)
        except Exception:
            LOGGER.warning("Fetch failed for message %s", message.message_id, exc_info=True)
            return

        await self._aggregator.append(
            ReplyTarget(chat_id=message.chat_id, message_id=message.message_id),
            result.status_line,
        )
        if result.file_name:
            self._spawn(self._persist(message, result.file_name))

    async def _persist(self, message: InboundMessage, name: str) -> None:
        try:
            await self._persister.persist(message, name)
        except Exception:
            LOGGER.warning("Save message %s as %s failed", message.message_id, name, exc_info=True)

    async def _record_media_group(self, message: InboundMessage) -> None:
        if self._media_groups is None or not message.media_group_id:
            return
        # Each media branch is recorded on its own; a message carrying both a
        # photo and a video contributes two members.
        for item in message.media:
            members = await self._media_groups.record(message.media_group_id, item)
            if members is not None:
                LOGGER.info(
                    "Media group %s complete with %s items: %s",
                    message.media_group_id,
                    len(members),
                    ", ".join(f"{member.kind}:{member.file_id}" for member in members),
                )
