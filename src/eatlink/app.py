"""Application entry point for the eatlink download bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

from eatlink import settings
from eatlink.adapters.json_persister import JsonMessagePersister
from eatlink.adapters.telegram_bot_replier import TelegramBotApiReplier
from eatlink.adapters.telegram_fetcher import TelegramMediaFetcher
from eatlink.adapters.telegram_mapper import build_inbound_message
from eatlink.adapters.telegram_replier import TelegramClientReplier
from eatlink.client import bot_token, build_client
from eatlink.core.batch import BatchAggregator
from eatlink.core.config import BatchConfig, MediaGroupConfig
from eatlink.core.dispatcher import IngestionDispatcher
from eatlink.core.errors import QueueFull
from eatlink.core.media_group import MediaGroupCache
from eatlink.core.scheduler import DebounceScheduler

NAME = "EATLINK"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(os.getenv("LOG_LEVEL") or config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/eatlink.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_replier(client):
    # Select the reply adapter based on configuration to keep the core
    # scheduler independent from delivery details.
    if settings.REPLY_METHOD == "bot_api":
        return TelegramBotApiReplier(bot_token=bot_token())
    if settings.REPLY_METHOD == "client":
        return TelegramClientReplier(client)
    raise RuntimeError("notifications.reply_method must be 'client' or 'bot_api'")


def _log_task_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logging.getLogger(__name__).error(
            "Background task %s stopped", task.get_name(), exc_info=error
        )


async def _serve(client) -> None:
    logger = logging.getLogger(__name__)

    await client.start(bot_token=bot_token())

    batch_config = BatchConfig(
        quiet_period=settings.QUIET_PERIOD,
        queue_capacity=settings.QUEUE_CAPACITY,
        reset_on_activity=settings.RESET_ON_ACTIVITY,
        max_wait=settings.MAX_WAIT,
        send_retries=settings.SEND_RETRIES,
        send_backoff=settings.SEND_BACKOFF,
    )
    media_groups = MediaGroupCache(
        MediaGroupConfig(
            completion_threshold=settings.MEDIA_GROUP_THRESHOLD,
            sweep_interval=settings.MEDIA_GROUP_SWEEP_INTERVAL,
            max_age=settings.MEDIA_GROUP_MAX_AGE,
        )
    )
    aggregator = BatchAggregator()
    dispatcher = IngestionDispatcher(
        fetcher=TelegramMediaFetcher(client, settings.DOWNLOAD_DIR),
        persister=JsonMessagePersister(settings.DOWNLOAD_DIR),
        aggregator=aggregator,
        config=batch_config,
        media_groups=media_groups,
    )
    scheduler = DebounceScheduler(
        dispatcher=dispatcher,
        aggregator=aggregator,
        replier=_build_replier(client),
        config=batch_config,
    )

    # The handler only maps and enqueues; all downloading happens in the
    # dispatcher's tasks so Telethon's update loop is never blocked.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            message = build_inbound_message(event.message)
            dispatcher.submit(message)
            logger.debug("Queued message %s", message.message_id)
        except QueueFull:
            logger.warning("Queue full, dropping message %s from chat %s", event.message.id, event.chat_id)
        except Exception:
            logger.exception("Error while queueing message")

    tasks = [
        asyncio.create_task(scheduler.run(), name="debounce-scheduler"),
        asyncio.create_task(media_groups.run_sweeper(), name="media-group-sweeper"),
    ]
    for task in tasks:
        task.add_done_callback(_log_task_exit)

    logger.info("Bot connected. Listening for incoming messages...")
    try:
        await client.run_until_disconnected()
    finally:
        # In-flight batches are not flushed on shutdown.
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if dispatcher.pending:
            logger.info("Shutting down with %s downloads in flight", dispatcher.pending)


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting bot...")
    os.makedirs(settings.DOWNLOAD_DIR, exist_ok=True)
    logger.info("Downloading into %s", settings.DOWNLOAD_DIR)

    client = build_client()
    client.loop.run_until_complete(_serve(client))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="eatlink")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the download bot")

    parser.parse_args(argv)
    _run()


if __name__ == "__main__":
    main()
