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
"""CSRF token store protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from formshield.security.csrf.types import TokenRecord


@runtime_checkable
class CsrfTokenStore(Protocol):
    """Keyed storage of token records by session handle.

    Implementations never return expired records and hold at most one
    record per session handle.
    """

    async def set(self, session_handle: str, record: TokenRecord) -> None: ...

    async def get(self, session_handle: str) -> TokenRecord | None: ...

    async def take(
        self, session_handle: str, expected: TokenRecord | None = None
    ) -> TokenRecord | None: ...

    async def delete(self, session_handle: str) -> bool: ...

    async def clear(self) -> None: ...

    async def sweep(self) -> int: ...

    def stats(self) -> dict[str, Any]: ...
