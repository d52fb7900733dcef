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
"""Double-submit cookie helpers.

The cookie value is compared against a copy sent in a header or form
field. No server-side state is involved and no HMAC binding is applied.
"""

from __future__ import annotations

import hmac

from formshield.security.csrf.signing import generate_secure_random

CSRF_COOKIE_NAME: str = "XSRF-TOKEN"
"""Name of the cookie that carries the double-submit value."""

CSRF_HEADER_NAME: str = "X-XSRF-TOKEN"
"""Name of the request header that echoes the double-submit value."""


def generate_cookie_value(num_bytes: int = 32) -> str:
    """Generate a random double-submit value (hex, ``2 * num_bytes`` chars)."""
    return generate_secure_random(num_bytes)


def validate_double_submit(submitted: str, cookie_value: str) -> bool:
    """Return ``True`` if both values are exactly equal.

    Two empty strings are equal; empty against non-empty is not.
    """
    return hmac.compare_digest(submitted.encode("utf-8"), cookie_value.encode("utf-8"))
