"""Error types raised across the core/adapter boundary."""

from __future__ import annotations


class EatlinkError(Exception):
    """Base class for all eatlink errors."""


class QueueFull(EatlinkError):
    """The ingestion queue is at capacity; the message was not accepted."""


class FetchError(EatlinkError):
    """A media download failed."""


class PersistError(EatlinkError):
    """Saving the message next to its media failed."""


class SendError(EatlinkError):
    """Sending the batch reply failed."""
