# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for InMemoryCsrfTokenStore — expiry, eviction, atomic take, sweep."""

from __future__ import annotations

import asyncio

import pytest

from formshield.security.csrf.adapters.memory import InMemoryCsrfTokenStore
from formshield.security.csrf.ports.outbound import CsrfTokenStore
from formshield.security.csrf.types import TokenRecord


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _record(clock: FakeClock, ttl: float = 3600, base: str = "base") -> TokenRecord:
    return TokenRecord(
        token_base=base,
        secret="secret",
        expires_at=clock.now + ttl,
        created_at=clock.now,
    )


class TestStoreBasics:
    def test_implements_port(self) -> None:
        assert isinstance(InMemoryCsrfTokenStore(), CsrfTokenStore)

    @pytest.mark.asyncio
    async def test_set_and_get(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        record = _record(clock)
        await store.set("s1", record)
        assert await store.get("s1") is record

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        store = InMemoryCsrfTokenStore()
        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_set_overwrites_existing_session(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        first, second = _record(clock, base="a"), _record(clock, base="b")
        await store.set("s1", first)
        await store.set("s1", second)
        assert await store.get("s1") is second
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        await store.set("s1", _record(clock))
        assert await store.delete("s1") is True
        assert await store.delete("s1") is False
        assert await store.get("s1") is None

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        for i in range(5):
            await store.set(f"s{i}", _record(clock))
        await store.clear()
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_stats(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(max_size=50, clock=clock)
        for i in range(4):
            await store.set(f"s{i}", _record(clock))
        stats = store.stats()
        assert stats["size"] == 4
        assert stats["max_size"] == 50
        assert stats["approximate_memory"] == "2 KB (estimated)"

    def test_rejects_non_positive_max_size(self) -> None:
        with pytest.raises(ValueError):
            InMemoryCsrfTokenStore(max_size=0)


class TestLazyExpiry:
    @pytest.mark.asyncio
    async def test_record_live_before_expiry(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        await store.set("s1", _record(clock, ttl=60))
        clock.advance(59.999)
        assert await store.get("s1") is not None

    @pytest.mark.asyncio
    async def test_record_absent_at_expiry_and_removed(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        await store.set("s1", _record(clock, ttl=60))
        clock.advance(60)
        assert await store.get("s1") is None
        assert len(store) == 0


class TestTake:
    @pytest.mark.asyncio
    async def test_take_removes_and_returns(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        record = _record(clock)
        await store.set("s1", record)
        assert await store.take("s1") is record
        assert await store.take("s1") is None

    @pytest.mark.asyncio
    async def test_take_with_expected_ignores_replaced_record(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        old, new = _record(clock, base="old"), _record(clock, base="new")
        await store.set("s1", old)
        await store.set("s1", new)
        assert await store.take("s1", expected=old) is None
        assert await store.get("s1") is new

    @pytest.mark.asyncio
    async def test_take_expired_returns_none(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        await store.set("s1", _record(clock, ttl=1))
        clock.advance(5)
        assert await store.take("s1") is None

    @pytest.mark.asyncio
    async def test_concurrent_take_succeeds_once(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        record = _record(clock)
        await store.set("s1", record)
        results = await asyncio.gather(*(store.take("s1", expected=record) for _ in range(10)))
        assert sum(r is not None for r in results) == 1


class TestEviction:
    @pytest.mark.asyncio
    async def test_size_never_exceeds_max(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(max_size=100, clock=clock)
        for i in range(100 + 1000):
            clock.advance(0.001)
            await store.set(f"s{i}", _record(clock))
            assert len(store) <= 100

    @pytest.mark.asyncio
    async def test_expired_records_evicted_first(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(max_size=10, clock=clock)
        for i in range(5):
            await store.set(f"short{i}", _record(clock, ttl=1))
        for i in range(5):
            await store.set(f"long{i}", _record(clock, ttl=3600))
        clock.advance(2)

        await store.set("new", _record(clock))

        assert len(store) == 6
        for i in range(5):
            assert await store.get(f"long{i}") is not None

    @pytest.mark.asyncio
    async def test_oldest_records_evicted_when_all_live(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(max_size=20, clock=clock)
        for i in range(20):
            clock.advance(1)
            await store.set(f"s{i}", _record(clock))

        await store.set("new", _record(clock))

        # 10% of capacity (2 records) removed, oldest first.
        assert len(store) == 19
        assert await store.get("s0") is None
        assert await store.get("s1") is None
        assert await store.get("s2") is not None
        assert await store.get("new") is not None

    @pytest.mark.asyncio
    async def test_small_store_evicts_at_least_one(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(max_size=3, clock=clock)
        for i in range(10):
            clock.advance(1)
            await store.set(f"s{i}", _record(clock))
            assert len(store) <= 3
        assert await store.get("s9") is not None


class TestSweep:
    @pytest.mark.asyncio
    async def test_sweep_removes_only_expired(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(clock=clock)
        await store.set("short", _record(clock, ttl=10))
        await store.set("long", _record(clock, ttl=1000))
        clock.advance(10)

        removed = await store.sweep()

        assert removed == 1
        assert len(store) == 1
        assert await store.get("long") is not None

    @pytest.mark.asyncio
    async def test_background_sweep_runs_on_interval(self) -> None:
        clock = FakeClock()
        store = InMemoryCsrfTokenStore(sweep_interval=0.01, clock=clock)
        await store.set("s1", _record(clock, ttl=1))
        clock.advance(5)

        await store.start()
        try:
            assert store.running
            for _ in range(100):
                if len(store) == 0:
                    break
                await asyncio.sleep(0.01)
        finally:
            await store.stop()

        assert len(store) == 0
        assert not store.running
