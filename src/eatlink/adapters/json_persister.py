"""JSON message persistence adapter.

Stores the full message next to the media it produced as
``<download_dir>/<YYYY-MM-DD>/<file name>.json``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import asdict

from eatlink.adapters.telegram_fetcher import dated_directory
from eatlink.core.errors import PersistError
from eatlink.core.models import InboundMessage

LOGGER = logging.getLogger(__name__)


def message_to_json(message: InboundMessage) -> str:
    """Serialize the platform message, falling back to the core fields."""

    raw = message.raw
    if raw is not None and hasattr(raw, "to_json"):
        return raw.to_json(indent=2, ensure_ascii=False)

    payload = asdict(message)
    payload.pop("raw", None)
    return json.dumps(payload, indent=2, ensure_ascii=False)


class JsonMessagePersister:
    """Persister adapter writing one pretty-printed JSON file per message."""

    def __init__(self, download_dir: str) -> None:
        self._download_dir = download_dir

    def _write(self, path: str, content: str) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(content)

    async def persist(self, message: InboundMessage, name: str) -> None:
        path = os.path.join(dated_directory(self._download_dir), f"{name}.json")
        try:
            content = message_to_json(message)
            await asyncio.to_thread(self._write, path, content)
        except (OSError, TypeError, ValueError) as e:
            raise PersistError(f"Save json {path} error: {e}") from e
        LOGGER.debug("Save json %s successfully.", path)
