"""Tests for per-key critical sections."""

import asyncio

from rmc.core.services.locks import KeyedLock


class TestKeyedLock:
    async def test_same_key_is_serialized(self):
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold(1):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )

    async def test_different_keys_run_concurrently(self):
        locks = KeyedLock()
        inside = asyncio.Event()

        async def first() -> None:
            async with locks.hold(1):
                await asyncio.wait_for(inside.wait(), timeout=1)

        async def second() -> None:
            async with locks.hold(2):
                inside.set()

        await asyncio.gather(first(), second())

    async def test_idle_locks_are_dropped(self):
        locks = KeyedLock()
        async with locks.hold("rm-1"):
            assert locks.is_locked("rm-1")
            assert locks.active_count == 1
        assert not locks.is_locked("rm-1")
        assert locks.active_count == 0

    async def test_released_on_error(self):
        locks = KeyedLock()
        try:
            async with locks.hold(5):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert locks.active_count == 0
