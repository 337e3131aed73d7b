"""Telegram media download adapter.

Files land in a per-day directory under the download root. A message with
both a photo and a video only downloads the photo.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Optional

from eatlink.core.errors import FetchError
from eatlink.core.models import PHOTO, VIDEO, FetchResult, InboundMessage, MediaItem

LOGGER = logging.getLogger(__name__)

NO_MEDIA_STATUS = "No media download"


def dated_directory(root: str, now: Optional[datetime] = None) -> str:
    """Return ``<root>/<YYYY-MM-DD>`` for the given (or current local) time."""

    now = now or datetime.now()
    return os.path.join(root, now.strftime("%Y-%m-%d"))


def _target_name(item: MediaItem) -> str:
    if item.kind == PHOTO:
        return f"photo_{item.file_id}.jpg"
    if item.file_name:
        # Sender-supplied names must not escape the download directory.
        name = os.path.basename(item.file_name)
        if name and name not in {".", ".."}:
            return name
    return f"video_{item.file_id}.mp4"


def _status_line(item: MediaItem, file_name: str) -> str:
    if item.kind == PHOTO:
        return f"Downloaded photo {item.file_id}"
    return f"Downloaded video {file_name}"


class TelegramMediaFetcher:
    """Fetcher adapter that downloads media through a Telethon client."""

    def __init__(self, client, download_dir: str) -> None:
        self._client = client
        self._download_dir = download_dir

    def _pick(self, message: InboundMessage) -> Optional[MediaItem]:
        for kind in (PHOTO, VIDEO):
            for item in message.media:
                if item.kind == kind:
                    return item
        return None

    async def fetch(self, message: InboundMessage) -> FetchResult:
        item = self._pick(message)
        if item is None:
            return FetchResult(status_line=NO_MEDIA_STATUS)

        directory = dated_directory(self._download_dir)
        file_name = _target_name(item)
        path = os.path.join(directory, file_name)
        try:
            os.makedirs(directory, exist_ok=True)
            LOGGER.debug("Downloading %s: %s", item.kind, item.file_id)
            downloaded = await self._client.download_media(message.raw, file=path)
        except Exception as e:
            raise FetchError(f"Download of {item.kind} {item.file_id} failed: {e}") from e
        if downloaded is None:
            raise FetchError(f"Download of {item.kind} {item.file_id} returned nothing")

        LOGGER.info("Downloaded %s: %s", item.kind, path)
        return FetchResult(status_line=_status_line(item, file_name), file_name=file_name)
