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
"""PeriodicTask — a cancellable fixed-rate asyncio loop.

Usage::

    task = PeriodicTask("csrf-sweep", store.sweep, timedelta(minutes=5))
    await task.start()
    # ... application runs ...
    await task.stop()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs *action* every *interval* until stopped.

    The action may be sync or async. An exception raised by one run is
    logged and the loop keeps going; the next run happens on schedule.
    """

    def __init__(
        self,
        name: str,
        action: Callable[[], Any],
        interval: timedelta,
        initial_delay: timedelta | None = None,
    ) -> None:
        if interval.total_seconds() <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._name = name
        self._action = action
        self._interval = interval
        self._initial_delay = initial_delay
        self._task: asyncio.Task[None] | None = None
        self._runs = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def runs(self) -> int:
        """Number of completed runs, successful or not."""
        return self._runs

    async def start(self) -> None:
        """Start the loop. Calling start on a running task is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run_fixed_rate_loop(), name=self._name)
        self._task.add_done_callback(self._loop_done_callback)
        logger.debug("Periodic task %s started (interval=%s)", self._name, self._interval)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        logger.debug("Periodic task %s stopped after %d runs", self._name, self._runs)

    async def run_once(self) -> None:
        """Invoke the action a single time, logging rather than raising failures."""
        try:
            result = self._action()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            logger.exception("Periodic task %s failed", self._name)
        finally:
            self._runs += 1

    async def _run_fixed_rate_loop(self) -> None:
        if self._initial_delay:
            await asyncio.sleep(self._initial_delay.total_seconds())
        while True:
            await asyncio.sleep(self._interval.total_seconds())
            await self.run_once()

    def _loop_done_callback(self, task: asyncio.Task[None]) -> None:
        if not task.cancelled():
            exc = task.exception()
            if exc is not None:
                logger.error("Periodic task %s loop failed: %s", self._name, exc, exc_info=exc)
