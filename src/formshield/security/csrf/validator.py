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
"""CsrfTokenValidator — checks, consumes and rotates session-bound tokens."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from formshield.kernel.exceptions import SigningUnavailableException
from formshield.security.csrf.headers import (
    HOST_HEADER,
    ORIGIN_HEADER,
    get_header,
    session_from_headers,
)
from formshield.security.csrf.issuer import CsrfTokenIssuer
from formshield.security.csrf.origin import validate_origin
from formshield.security.csrf.ports.outbound import CsrfTokenStore
from formshield.security.csrf.signing import FallbackHmacSigner
from formshield.security.csrf.types import (
    INVALID_ORIGIN,
    INVALID_SESSION,
    INVALID_SIGNATURE,
    MALFORMED_TOKEN,
    MISSING_SESSION,
    MISSING_TOKEN,
    ORIGIN_MISMATCH,
    TOKEN_SEPARATOR,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def split_token(token: str) -> tuple[str, str] | None:
    """Split a token into ``(base, signature)``.

    Only the first two segments are used, so ``"a.b.c"`` parses as
    ``("a", "b")`` and is rejected later by signature verification.
    Returns ``None`` when either half is missing or empty.
    """
    parts = token.split(TOKEN_SEPARATOR)
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


class CsrfTokenValidator:
    """Validates tokens in a fixed order and rotates them on success.

    Checks run cheapest first: presence, shape, session lookup and origin
    all happen before the constant-time signature comparison. The first
    failing check determines the error.
    """

    def __init__(
        self,
        store: CsrfTokenStore,
        issuer: CsrfTokenIssuer,
        signer: FallbackHmacSigner | None = None,
    ) -> None:
        self._store = store
        self._issuer = issuer
        self._signer = signer or FallbackHmacSigner()

    async def validate(
        self,
        token: str | None,
        session_handle: str | None = None,
        *,
        origin: str | None = None,
        host: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """Validate *token* for *session_handle*.

        Args:
            token: The public token presented by the client.
            session_handle: Session the token must be bound to. Falls back to
                the session headers in *headers* when omitted.
            origin: The request ``Origin``; falls back to *headers*.
            host: The request ``Host``; falls back to *headers*.
            headers: Inbound request headers, used only for fallbacks.
        """
        if not token:
            return ValidationResult.failure(MISSING_TOKEN)

        if headers is not None:
            session_handle = session_handle or session_from_headers(headers)
            origin = origin if origin is not None else get_header(headers, ORIGIN_HEADER)
            host = host if host is not None else get_header(headers, HOST_HEADER)
        if not session_handle:
            return ValidationResult.failure(MISSING_SESSION)

        parts = split_token(token)
        if parts is None:
            return ValidationResult.failure(MALFORMED_TOKEN)
        token_base, signature = parts

        record = await self._store.get(session_handle)
        if record is None:
            return ValidationResult.failure(INVALID_SESSION)

        if record.bound_origin and origin != record.bound_origin:
            return ValidationResult.failure(ORIGIN_MISMATCH)

        if origin and not validate_origin(origin, host):
            return ValidationResult.failure(INVALID_ORIGIN)

        message = f"{token_base}:{session_handle}:{record.bound_origin or ''}"
        try:
            signature_ok = self._signer.verify(record.secret, message, signature)
        except SigningUnavailableException:
            logger.error("CSRF signature could not be verified: no HMAC backend available")
            signature_ok = False
        if not signature_ok:
            return ValidationResult.failure(INVALID_SIGNATURE)

        if await self._store.take(session_handle, expected=record) is None:
            # Another request consumed or replaced the record first.
            return ValidationResult.failure(INVALID_SESSION)

        # Replacement goes to a fresh session; the consumed one stays empty.
        issued = await self._issuer.issue(None, record.bound_origin)
        logger.debug("Consumed CSRF token for session %s", session_handle)
        return ValidationResult(
            valid=True, new_token=issued.token, new_session_handle=issued.session_handle
        )
