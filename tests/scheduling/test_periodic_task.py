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
"""Tests for PeriodicTask — fixed-rate background loop."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from formshield.scheduling import PeriodicTask


class TestPeriodicTaskConstruction:
    @pytest.mark.parametrize("seconds", [0, -1])
    def test_rejects_non_positive_interval(self, seconds: int) -> None:
        with pytest.raises(ValueError, match="interval must be positive"):
            PeriodicTask("bad", lambda: None, timedelta(seconds=seconds))

    def test_initial_state(self) -> None:
        task = PeriodicTask("sweep", lambda: None, timedelta(seconds=1))
        assert task.name == "sweep"
        assert task.running is False
        assert task.runs == 0


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_sync_action(self) -> None:
        calls: list[int] = []
        task = PeriodicTask("sync", lambda: calls.append(1), timedelta(seconds=1))

        await task.run_once()

        assert calls == [1]
        assert task.runs == 1

    @pytest.mark.asyncio
    async def test_async_action(self) -> None:
        calls: list[int] = []

        async def action() -> None:
            calls.append(1)

        task = PeriodicTask("async", action, timedelta(seconds=1))
        await task.run_once()

        assert calls == [1]

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        def action() -> None:
            raise RuntimeError("boom")

        task = PeriodicTask("failing", action, timedelta(seconds=1))
        with caplog.at_level("ERROR", logger="formshield.scheduling.periodic"):
            await task.run_once()

        assert task.runs == 1
        assert "Periodic task failing failed" in caplog.text


class TestLoop:
    @pytest.mark.asyncio
    async def test_runs_repeatedly_until_stopped(self) -> None:
        calls: list[int] = []
        task = PeriodicTask("tick", lambda: calls.append(1), timedelta(milliseconds=10))

        await task.start()
        assert task.running is True
        await asyncio.sleep(0.1)
        await task.stop()

        assert task.running is False
        assert len(calls) >= 2
        count = len(calls)
        await asyncio.sleep(0.05)
        assert len(calls) == count

    @pytest.mark.asyncio
    async def test_first_run_waits_one_interval(self) -> None:
        calls: list[int] = []
        task = PeriodicTask("slow", lambda: calls.append(1), timedelta(seconds=10))

        await task.start()
        await asyncio.sleep(0.02)
        await task.stop()

        assert calls == []

    @pytest.mark.asyncio
    async def test_loop_survives_failures(self) -> None:
        attempts: list[int] = []

        def action() -> None:
            attempts.append(1)
            raise RuntimeError("boom")

        task = PeriodicTask("flaky", action, timedelta(milliseconds=10))
        await task.start()
        await asyncio.sleep(0.1)
        await task.stop()

        assert len(attempts) >= 2

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self) -> None:
        task = PeriodicTask("once", lambda: None, timedelta(seconds=1))
        await task.start()
        first = task._task
        await task.start()
        assert task._task is first
        await task.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        task = PeriodicTask("idle", lambda: None, timedelta(seconds=1))
        await task.stop()
        assert task.running is False
