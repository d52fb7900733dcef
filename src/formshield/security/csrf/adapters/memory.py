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
"""In-memory CSRF token store with lazy expiry, size cap and periodic sweep."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from formshield.scheduling.periodic import PeriodicTask
from formshield.security.csrf.types import TokenRecord

logger = logging.getLogger(__name__)

_EVICTION_RATIO = 0.1
_ESTIMATED_KB_PER_RECORD = 0.5


class InMemoryCsrfTokenStore:
    """Bounded map of session handle to :class:`TokenRecord`.

    Suitable for single-process deployments. Mutations are serialised with
    an ``asyncio.Lock``; :meth:`take` is the atomic get-and-delete used to
    consume a token exactly once.

    Args:
        max_size: Upper bound on stored records.
        sweep_interval: Seconds between background sweeps once started.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        max_size: int = 10_000,
        sweep_interval: float = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._records: dict[str, TokenRecord] = {}
        self._lock = asyncio.Lock()
        self._max_size = max_size
        self._clock = clock
        self._sweeper = PeriodicTask(
            "csrf-token-sweep", self.sweep, timedelta(seconds=sweep_interval)
        )

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def running(self) -> bool:
        """``True`` while the background sweep is scheduled."""
        return self._sweeper.running

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the periodic sweep of expired records."""
        await self._sweeper.start()

    async def stop(self) -> None:
        """Cancel the periodic sweep."""
        await self._sweeper.stop()

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    async def set(self, session_handle: str, record: TokenRecord) -> None:
        """Insert or overwrite the record for *session_handle*."""
        async with self._lock:
            if len(self._records) >= self._max_size:
                self._evict()
            self._records[session_handle] = record

    async def get(self, session_handle: str) -> TokenRecord | None:
        """Return the live record, or ``None`` if missing or expired."""
        async with self._lock:
            return self._live(session_handle)

    async def take(
        self, session_handle: str, expected: TokenRecord | None = None
    ) -> TokenRecord | None:
        """Atomically remove and return the live record.

        With *expected*, the record is removed only if it is that exact
        record; otherwise nothing changes and ``None`` is returned.
        """
        async with self._lock:
            record = self._live(session_handle)
            if record is None:
                return None
            if expected is not None and record is not expected:
                return None
            del self._records[session_handle]
            return record

    async def delete(self, session_handle: str) -> bool:
        """Remove a record. Returns ``True`` if one existed."""
        async with self._lock:
            return self._records.pop(session_handle, None) is not None

    async def clear(self) -> None:
        """Remove all records."""
        async with self._lock:
            self._records.clear()

    async def sweep(self) -> int:
        """Remove every expired record. Returns the number removed.

        The lock is taken per record so request handling is never blocked
        for longer than one inspection.
        """
        removed = 0
        for session_handle in list(self._records):
            async with self._lock:
                record = self._records.get(session_handle)
                if record is not None and record.is_expired(self._clock()):
                    del self._records[session_handle]
                    removed += 1
        if removed:
            logger.debug("Swept %d expired CSRF token(s), %d remaining", removed, len(self._records))
        return removed

    def stats(self) -> dict[str, Any]:
        size = len(self._records)
        return {
            "size": size,
            "max_size": self._max_size,
            "approximate_memory": f"{round(size * _ESTIMATED_KB_PER_RECORD)} KB (estimated)",
        }

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _live(self, session_handle: str) -> TokenRecord | None:
        record = self._records.get(session_handle)
        if record is None:
            return None
        if record.is_expired(self._clock()):
            del self._records[session_handle]
            return None
        return record

    def _evict(self) -> None:
        """Drop expired records, then the oldest ones if still at capacity."""
        now = self._clock()
        expired = [key for key, record in self._records.items() if record.is_expired(now)]
        for key in expired:
            del self._records[key]

        evicted = 0
        if len(self._records) >= self._max_size:
            count = max(1, int(self._max_size * _EVICTION_RATIO))
            oldest = sorted(self._records.items(), key=lambda item: item[1].created_at)[:count]
            for key, _ in oldest:
                del self._records[key]
            evicted = len(oldest)

        logger.info(
            "CSRF token store at capacity: removed %d expired and %d oldest record(s)",
            len(expired),
            evicted,
        )
