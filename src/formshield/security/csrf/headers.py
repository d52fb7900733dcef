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
"""Header names and multi-source extraction for CSRF tokens and sessions.

Lookups are case-insensitive and work with Starlette ``Headers`` as well
as plain mappings.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

TOKEN_HEADERS: tuple[str, ...] = ("X-CSRF-Token", "CSRF-Token", "X-XSRF-Token")
"""Token header names, highest priority first."""

SESSION_HEADERS: tuple[str, ...] = ("X-Session-ID", "X-CSRF-Session")
"""Session handle header names used when validating."""

TRACE_HEADER = "X-Request-ID"
"""Last-resort session source, consulted only when retrieving or issuing."""

ORIGIN_HEADER = "Origin"
HOST_HEADER = "Host"


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Return the value of header *name*, ignoring case."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def first_header(headers: Mapping[str, str], names: Sequence[str]) -> str | None:
    """Return the first non-empty value among *names*, in order."""
    for name in names:
        value = get_header(headers, name)
        if value:
            return value
    return None


def token_from_headers(headers: Mapping[str, str]) -> str | None:
    return first_header(headers, TOKEN_HEADERS)


def session_from_headers(headers: Mapping[str, str], *, include_trace: bool = False) -> str | None:
    """Extract the session handle.

    Args:
        include_trace: Also accept ``X-Request-ID`` as a last resort. Only
            for token retrieval; validation never trusts the trace header.
    """
    names = (*SESSION_HEADERS, TRACE_HEADER) if include_trace else SESSION_HEADERS
    return first_header(headers, names)
