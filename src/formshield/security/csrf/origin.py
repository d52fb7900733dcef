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
"""Same-origin check of the ``Origin`` header against ``Host``."""

from __future__ import annotations

from urllib.parse import urlsplit


def origin_hostname(origin: str) -> str | None:
    """Return the hostname of *origin*, or ``None`` if it is not a URL."""
    try:
        parts = urlsplit(origin)
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    return hostname


def validate_origin(origin: str | None, host: str | None) -> bool:
    """Return ``True`` if *origin* refers to *host*.

    Accepts ``https://{host}`` and ``http://{host}`` exactly (the latter for
    local development without TLS), or any origin whose hostname equals
    *host* verbatim. Subdomains and unparseable origins are rejected.
    """
    if not origin or not host:
        return False
    if origin in (f"https://{host}", f"http://{host}"):
        return True
    return origin_hostname(origin) == host
