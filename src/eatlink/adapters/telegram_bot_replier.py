"""Telegram Bot API reply adapter.

Uses the HTTP Bot API for delivery so replies can go out even when the
Telethon session is busy with downloads.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request

from eatlink.core.errors import SendError


class TelegramBotApiReplier:
    """Replier adapter that sends messages via the Telegram Bot API."""

    def __init__(self, bot_token: str, timeout: float = 10.0) -> None:
        self._bot_token = bot_token
        self._timeout = timeout

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def _build_request(self, chat_id: int, reply_to: int, text: str) -> urllib.request.Request:
        payload = {
            "chat_id": chat_id,
            "text": text,
            "reply_parameters": {"message_id": reply_to, "allow_sending_without_reply": True},
            "disable_web_page_preview": True,
        }
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        return request

    def _post(self, request: urllib.request.Request) -> None:
        try:
            with urllib.request.urlopen(request, timeout=self._timeout):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise SendError(f"Bot API error {e.code}: {body}") from e
        except urllib.error.URLError as e:
            raise SendError(f"Bot API unreachable: {e.reason}") from e

    async def send_reply(self, chat_id: int, reply_to: int, text: str) -> None:
        """Send ``text`` as a reply; the blocking call runs in a worker thread."""

        request = self._build_request(chat_id, reply_to, text)
        await asyncio.to_thread(self._post, request)
