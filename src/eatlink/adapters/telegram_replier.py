"""Telegram reply adapter using the logged-in Telethon client."""

from __future__ import annotations

from eatlink.core.errors import SendError


class TelegramClientReplier:
    """Replier adapter that answers through the bot's own Telethon session."""

    def __init__(self, client) -> None:
        self._client = client

    async def send_reply(self, chat_id: int, reply_to: int, text: str) -> None:
        """Send ``text`` to ``chat_id`` as a reply to message ``reply_to``."""

        try:
            await self._client.send_message(chat_id, text, reply_to=reply_to)
        except Exception as e:
            raise SendError(f"Reply to chat {chat_id} failed: {e}") from e
