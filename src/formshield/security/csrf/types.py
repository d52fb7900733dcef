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
"""Value types and error messages for session-bound CSRF tokens."""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Validation error messages
# ---------------------------------------------------------------------------
MISSING_TOKEN = "Missing CSRF token"
MISSING_SESSION = "Missing session ID"
MALFORMED_TOKEN = "Malformed token"
INVALID_SESSION = "Invalid session or token expired"
"""Covers never-issued, already-consumed and expired tokens alike."""
ORIGIN_MISMATCH = "Origin mismatch"
INVALID_ORIGIN = "Invalid origin"
INVALID_SIGNATURE = "Invalid token signature"

TOKEN_SEPARATOR = "."


@dataclass(frozen=True, eq=False)
class TokenRecord:
    """Server-side half of an issued token, keyed by session handle.

    Records compare by identity so the store can tell a consumed record
    from a re-issued one for the same session.

    Attributes:
        token_base: Random public half of the token.
        secret: Random HMAC key; never leaves the server.
        expires_at: Absolute expiry, epoch seconds.
        created_at: Absolute creation time, epoch seconds.
        bound_origin: Origin the token was issued for, if any.
    """

    token_base: str
    secret: str
    expires_at: float
    created_at: float
    bound_origin: str | None = None

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def signed_message(self, session_handle: str) -> str:
        """Canonical message covered by the token signature."""
        return f"{self.token_base}:{session_handle}:{self.bound_origin or ''}"


@dataclass(frozen=True)
class IssuedToken:
    """A freshly issued token and the session handle it is bound to."""

    token: str
    session_handle: str
    expires_in: int


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a token.

    On success ``new_token`` is the replacement token and
    ``new_session_handle`` the fresh session it is bound to.
    """

    valid: bool
    error: str | None = None
    new_token: str | None = None
    new_session_handle: str | None = None

    @classmethod
    def failure(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)


@dataclass(frozen=True)
class GateResult:
    """Outcome of checking an inbound request.

    ``new_headers`` is ``None`` for bypassed safe methods, an empty dict on
    failure, and carries the rotation header on success, so it can be
    merged into a response unconditionally whenever it is not ``None``.
    ``new_session_handle`` is the session the rotated token is bound to.
    """

    valid: bool
    error: str | None = None
    new_headers: dict[str, str] | None = None
    new_session_handle: str | None = None
