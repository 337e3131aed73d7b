"""Telegram client factory for eatlink.

The bot runs on a Telethon client that signs in with a bot token, so there
is no interactive login: the session file only caches the authorization and
the data-center address between restarts.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient

LOGGER = logging.getLogger(__name__)


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing {name} in environment")
    return value


def build_client() -> TelegramClient:
    """Create an unstarted Telethon client for the bot account.

    API_ID/API_HASH identify the application to Telegram even for bot logins;
    the token itself is passed later to ``client.start(bot_token=...)``.
    """

    load_dotenv()

    api_id = _require_env("API_ID")
    api_hash = _require_env("API_HASH")
    session_name = os.getenv("SESSION_NAME", "eatlink")

    LOGGER.info("Initializing Telegram client (session %s)", session_name)
    return TelegramClient(session_name, int(api_id), api_hash)


def bot_token() -> str:
    """Return the token the bot signs in with (also used by the Bot API replier)."""

    load_dotenv()
    return _require_env("BOT_TOKEN")
