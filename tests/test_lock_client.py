"""Tests for the in-process lock backend."""
import asyncio

import pytest

from ladders.utils.lock_client import LockClient, LockTimeoutError


class TestMemoryLocks:

    async def test_memory_backend_without_redis(self):
        assert LockClient(None).backend == "memory"

    async def test_same_name_is_exclusive(self):
        client = LockClient(None)
        order = []

        async def worker(label: str):
            async with client.lock("area:SW1", timeout=2):
                order.append(f"{label}-in")
                await asyncio.sleep(0.01)
                order.append(f"{label}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])

    async def test_different_names_do_not_block(self):
        client = LockClient(None)

        async with client.lock("area:SW1", timeout=1):
            async with client.lock("area:SW2", timeout=1):
                pass

    async def test_timeout(self):
        client = LockClient(None)

        async with client.lock("area:SW1", timeout=1):
            with pytest.raises(LockTimeoutError):
                async with client.lock("area:SW1", timeout=0.05):
                    pass

    async def test_released_after_error(self):
        client = LockClient(None)

        with pytest.raises(ValueError):
            async with client.lock("area:SW1", timeout=1):
                raise ValueError("boom")

        async with client.lock("area:SW1", timeout=0.05):
            pass
