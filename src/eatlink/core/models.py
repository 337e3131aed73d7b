"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

PHOTO = "photo"
VIDEO = "video"


@dataclass(frozen=True)
class MediaItem:
    """One downloadable media branch of an inbound message."""

    kind: str
    file_id: str
    file_name: Optional[str] = None


@dataclass(frozen=True)
class InboundMessage:
    """Minimal message context used by the ingestion pipeline."""

    chat_id: int
    message_id: int
    media: tuple[MediaItem, ...] = ()
    media_group_id: Optional[str] = None
    # Platform object kept for adapters (download, JSON dump).
    raw: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a successful media fetch."""

    status_line: str
    file_name: Optional[str] = None


@dataclass(frozen=True)
class ReplyTarget:
    chat_id: int
    message_id: int


@dataclass(frozen=True)
class Batch:
    """A drained batch, ready to be sent as one reply."""

    target: ReplyTarget
    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
