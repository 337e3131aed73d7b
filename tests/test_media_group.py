from __future__ import annotations

import asyncio

from eatlink.core.config import MediaGroupConfig
from eatlink.core.media_group import MediaGroupCache
from eatlink.core.models import MediaItem


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _cache(clock: FakeClock, **overrides) -> MediaGroupCache:
    return MediaGroupCache(MediaGroupConfig(**overrides), clock=clock)


def test_second_item_completes_group() -> None:
    cache = _cache(FakeClock())
    photo = MediaItem(kind="photo", file_id="1")
    video = MediaItem(kind="video", file_id="2")

    async def scenario():
        first = await cache.record("album", photo)
        second = await cache.record("album", video)
        return first, second

    first, second = asyncio.run(scenario())

    assert first is None
    assert second == [photo, video]
    assert "album" not in cache
    assert len(cache) == 0


def test_groups_are_tracked_independently() -> None:
    cache = _cache(FakeClock())

    async def scenario() -> None:
        await cache.record("a", MediaItem(kind="photo", file_id="1"))
        await cache.record("b", MediaItem(kind="photo", file_id="2"))

    asyncio.run(scenario())

    assert len(cache) == 2
    assert cache.get("a") == [MediaItem(kind="photo", file_id="1")]
    assert cache.get("missing") is None


def test_sweep_evicts_incomplete_group_once_stale() -> None:
    clock = FakeClock()
    cache = _cache(clock, max_age=30.0)
    asyncio.run(cache.record("album", MediaItem(kind="photo", file_id="1")))

    clock.advance(31)
    removed = asyncio.run(cache.sweep())

    assert removed == 1
    assert "album" not in cache


def test_sweep_keeps_group_still_accumulating() -> None:
    clock = FakeClock()
    cache = _cache(clock, max_age=30.0)
    asyncio.run(cache.record("old", MediaItem(kind="photo", file_id="1")))
    clock.advance(25)
    asyncio.run(cache.record("young", MediaItem(kind="photo", file_id="2")))
    clock.advance(10)

    removed = asyncio.run(cache.sweep())

    assert removed == 1
    assert "old" not in cache
    assert "young" in cache

    completed = asyncio.run(cache.record("young", MediaItem(kind="video", file_id="3")))
    assert completed is not None
    assert len(completed) == 2


def test_age_counts_from_first_member() -> None:
    clock = FakeClock()
    cache = _cache(clock, max_age=30.0, completion_threshold=3)

    async def scenario() -> None:
        await cache.record("album", MediaItem(kind="photo", file_id="1"))
        clock.advance(20)
        await cache.record("album", MediaItem(kind="photo", file_id="2"))
        clock.advance(15)

    asyncio.run(scenario())

    assert asyncio.run(cache.sweep()) == 1


def test_run_sweeper_sweeps_on_interval() -> None:
    clock = FakeClock()
    cache = _cache(clock, sweep_interval=0.01, max_age=5.0)

    async def scenario() -> None:
        await cache.record("album", MediaItem(kind="photo", file_id="1"))
        clock.advance(6)
        task = asyncio.create_task(cache.run_sweeper())
        try:
            for _ in range(100):
                if "album" not in cache:
                    break
                await asyncio.sleep(0.01)
        finally:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    asyncio.run(scenario())

    assert "album" not in cache
