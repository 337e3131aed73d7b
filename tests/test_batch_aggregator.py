from __future__ import annotations

import asyncio

from eatlink.core.batch import BatchAggregator
from eatlink.core.models import ReplyTarget


def test_starts_empty() -> None:
    aggregator = BatchAggregator()
    state = aggregator.snapshot()
    assert state.reply_target is None
    assert state.result_lines == []
    assert asyncio.run(aggregator.drain()) is None


def test_first_append_wins_reply_target() -> None:
    aggregator = BatchAggregator()

    async def scenario() -> None:
        await aggregator.append(ReplyTarget(chat_id=1, message_id=10), "A")
        await aggregator.append(ReplyTarget(chat_id=2, message_id=20), "B")

    asyncio.run(scenario())

    state = aggregator.snapshot()
    assert state.reply_target == ReplyTarget(chat_id=1, message_id=10)
    assert state.result_lines == ["A", "B"]


def test_drain_returns_batch_and_resets_state() -> None:
    aggregator = BatchAggregator()

    async def scenario():
        await aggregator.append(ReplyTarget(chat_id=1, message_id=10), "A")
        await aggregator.append(ReplyTarget(chat_id=1, message_id=11), "B")
        first = await aggregator.drain()
        second = await aggregator.drain()
        return first, second

    first, second = asyncio.run(scenario())

    assert first is not None
    assert first.target == ReplyTarget(chat_id=1, message_id=10)
    assert first.text == "A\nB"
    assert second is None
    state = aggregator.snapshot()
    assert state.reply_target is None
    assert state.result_lines == []


def test_concurrent_appends_all_land_in_one_batch() -> None:
    aggregator = BatchAggregator()
    targets = [ReplyTarget(chat_id=5, message_id=i) for i in range(25)]

    async def scenario():
        await asyncio.gather(*(aggregator.append(t, f"line {t.message_id}") for t in targets))
        return await aggregator.drain()

    batch = asyncio.run(scenario())

    assert batch is not None
    assert len(batch.lines) == 25
    assert sorted(batch.lines) == sorted(f"line {i}" for i in range(25))
    assert batch.target in targets


def test_snapshot_is_a_copy() -> None:
    aggregator = BatchAggregator()
    asyncio.run(aggregator.append(ReplyTarget(chat_id=1, message_id=1), "A"))

    state = aggregator.snapshot()
    state.result_lines.append("tampered")

    assert aggregator.snapshot().result_lines == ["A"]
