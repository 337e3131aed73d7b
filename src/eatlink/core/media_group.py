"""Media-group correlation cache.

Telegram delivers an album as several messages sharing one grouped id. The
cache collects the media items per group until the group is complete, and a
background sweep evicts partial groups once they are older than ``max_age``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from eatlink.core.config import MediaGroupConfig
from eatlink.core.models import MediaItem

LOGGER = logging.getLogger(__name__)


@dataclass
class MediaGroupEntry:
    first_seen: float
    items: list[MediaItem] = field(default_factory=list)


class MediaGroupCache:
    """Process-wide group id -> members mapping, guarded by one lock."""

    def __init__(
        self,
        config: MediaGroupConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._clock = clock
        self._entries: dict[str, MediaGroupEntry] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._entries

    def get(self, group_id: str) -> Optional[list[MediaItem]]:
        entry = self._entries.get(group_id)
        return list(entry.items) if entry else None

    async def record(self, group_id: str, item: MediaItem) -> Optional[list[MediaItem]]:
        """Add one item to its group.

        Returns the full member list when this item completes the group (the
        entry is removed at that point), otherwise None.
        """

        async with self._lock:
            entry = self._entries.get(group_id)
            if entry is None:
                entry = MediaGroupEntry(first_seen=self._clock())
                self._entries[group_id] = entry
            entry.items.append(item)
            if len(entry.items) < self._config.completion_threshold:
                return None
            del self._entries[group_id]
            return list(entry.items)

    async def sweep(self) -> int:
        """Evict groups that have been waiting at least ``max_age`` seconds."""

        now = self._clock()
        async with self._lock:
            stale = [
                group_id
                for group_id, entry in self._entries.items()
                if now - entry.first_seen >= self._config.max_age
            ]
            for group_id in stale:
                del self._entries[group_id]
        if stale:
            LOGGER.info("Evicted %s stale media groups", len(stale))
        return len(stale)

    async def run_sweeper(self) -> None:
        """Sweep forever on a fixed interval; stops only on cancellation."""

        while True:
            await asyncio.sleep(self._config.sweep_interval)
            await self.sweep()
