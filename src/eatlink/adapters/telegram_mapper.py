"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message

from eatlink.core.models import PHOTO, VIDEO, InboundMessage, MediaItem


def _photo_item(message: Message) -> Optional[MediaItem]:
    photo = getattr(message, "photo", None)
    if photo is None:
        return None
    # Telethon downloads the largest size by default.
    return MediaItem(kind=PHOTO, file_id=str(photo.id))


def _video_item(message: Message) -> Optional[MediaItem]:
    video = getattr(message, "video", None)
    if video is None:
        return None
    file_info = getattr(message, "file", None)
    file_name = getattr(file_info, "name", None) or None
    return MediaItem(kind=VIDEO, file_id=str(video.id), file_name=file_name)


def build_inbound_message(message: Message) -> InboundMessage:
    """Build a core InboundMessage from a Telethon Message."""

    media = tuple(item for item in (_photo_item(message), _video_item(message)) if item)
    grouped_id = getattr(message, "grouped_id", None)

    return InboundMessage(
        chat_id=message.chat_id,
        message_id=message.id,
        media=media,
        media_group_id=str(grouped_id) if grouped_id else None,
        raw=message,
    )
