"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for fetch, persistence, and reply adapters
so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Protocol

from eatlink.core.models import FetchResult, InboundMessage


class MediaFetcherPort(Protocol):
    """Downloads the media carried by a message."""

    async def fetch(self, message: InboundMessage) -> FetchResult:
        ...


class PersisterPort(Protocol):
    """Stores a message next to the media it produced."""

    async def persist(self, message: InboundMessage, name: str) -> None:
        ...


class ReplierPort(Protocol):
    """Sends the aggregated reply back to the originating chat."""

    async def send_reply(self, chat_id: int, reply_to: int, text: str) -> None:
        ...
