"""Static configuration for eatlink.

All user-editable settings (batching, media groups, downloads, replies,
logging) live in a single JSON file for quick edits without touching Python.
Secrets stay in the environment.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

CONFIG_PATH = os.getenv("EATLINK_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Batch reply loop.
# - QUIET_PERIOD: seconds without new messages before the summary is sent
# - QUEUE_CAPACITY: messages buffered before new ones are rejected
# - RESET_ON_ACTIVITY: false turns the debounce into fixed-interval polling
# - MAX_WAIT: a busy stream still gets a reply at least this often
_batch = _CONFIG.get("batch", {})
QUIET_PERIOD = float(_batch.get("quiet_period_seconds", 2))
QUEUE_CAPACITY = int(_batch.get("queue_capacity", 20))
RESET_ON_ACTIVITY = bool(_batch.get("reset_on_activity", True))
MAX_WAIT = float(_batch.get("max_wait_seconds", 10))
SEND_RETRIES = int(_batch.get("send_retries", 2))
SEND_BACKOFF = float(_batch.get("send_backoff_seconds", 1))

# Album correlation. Incomplete groups are evicted after MEDIA_GROUP_MAX_AGE.
_media_group = _CONFIG.get("media_group", {})
MEDIA_GROUP_THRESHOLD = int(_media_group.get("completion_threshold", 2))
MEDIA_GROUP_SWEEP_INTERVAL = float(_media_group.get("sweep_interval_seconds", 30))
MEDIA_GROUP_MAX_AGE = float(_media_group.get("max_age_seconds", 30))

# DOWNLOAD_DIR in the environment wins so containers can mount a volume.
_download = _CONFIG.get("download", {})
DOWNLOAD_DIR = _resolve_path(os.getenv("DOWNLOAD_DIR") or _download.get("dir", "downloads"))

# Reply method switches adapters without changing core logic.
_notifications = _CONFIG.get("notifications", {})
REPLY_METHOD = _notifications.get("reply_method", "client")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
