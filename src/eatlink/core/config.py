"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BatchConfig:
    """Queueing and debounce settings for the batch reply loop."""

    quiet_period: float = 2.0
    queue_capacity: int = 20
    # True: every dequeued message pushes the flush deadline back.
    # False: the deadline is a fixed period from the previous tick.
    reset_on_activity: bool = True
    # Upper bound on how long a batch can keep growing under steady traffic.
    max_wait: float = 10.0
    send_retries: int = 2
    send_backoff: float = 1.0


@dataclass(frozen=True)
class MediaGroupConfig:
    """Media-group correlation and eviction settings."""

    completion_threshold: int = 2
    sweep_interval: float = 30.0
    max_age: float = 30.0
