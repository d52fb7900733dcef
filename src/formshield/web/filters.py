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
"""Filter contracts for the web layer.

A filter sees every request before the route handler and decides whether to
pass it on with ``call_next`` or answer it directly. Requests and responses
are typed ``Any`` so Starlette stays inside ``web.adapters.starlette``.
"""

from __future__ import annotations

import abc
from collections.abc import Awaitable, Callable, Sequence
from fnmatch import fnmatch
from typing import Any, Protocol, runtime_checkable

CallNext = Callable[[Any], Awaitable[Any]]


@runtime_checkable
class WebFilter(Protocol):
    """A request filter run by :class:`WebFilterChainMiddleware`."""

    def should_not_filter(self, request: Any) -> bool: ...

    async def do_filter(self, request: Any, call_next: CallNext) -> Any: ...


class PathExcludingFilter(abc.ABC):
    """Base filter that skips requests whose path matches ``exclude_patterns``.

    Patterns are :func:`fnmatch.fnmatch` globs, so ``"/api/health*"`` also
    covers ``/api/health/live``.
    """

    exclude_patterns: Sequence[str] = ()

    def should_not_filter(self, request: Any) -> bool:
        path: str = request.url.path
        return any(fnmatch(path, pattern) for pattern in self.exclude_patterns)

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Return a response, usually by awaiting ``call_next(request)``."""
