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
"""CsrfTokenIssuer — mints session-bound, HMAC-signed tokens."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from formshield.security.csrf.ports.outbound import CsrfTokenStore
from formshield.security.csrf.properties import CsrfProperties
from formshield.security.csrf.signing import FallbackHmacSigner, generate_secure_random
from formshield.security.csrf.types import TOKEN_SEPARATOR, IssuedToken, TokenRecord

logger = logging.getLogger(__name__)

_SESSION_RANDOM_BYTES = 16
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_session_handle(now: float | None = None) -> str:
    """Create a session handle: ``{base36 millis}-{32 hex chars}``.

    The time prefix only aids debugging; uniqueness comes from the random
    suffix.
    """
    millis = int((time.time() if now is None else now) * 1000)
    return f"{_base36(millis)}-{generate_secure_random(_SESSION_RANDOM_BYTES)}"


class CsrfTokenIssuer:
    """Creates token records and the public ``{base}.{signature}`` token.

    Args:
        store: Where records are kept, keyed by session handle.
        properties: Expiry and random-length settings.
        signer: HMAC strategy; defaults to cryptography with stdlib fallback.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        store: CsrfTokenStore,
        properties: CsrfProperties | None = None,
        signer: FallbackHmacSigner | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._props = properties or CsrfProperties()
        self._signer = signer or FallbackHmacSigner()
        self._clock = clock

    async def issue(
        self,
        session_handle: str | None = None,
        origin: str | None = None,
    ) -> IssuedToken:
        """Issue a token for *session_handle* (generated if absent), bound to *origin*.

        Any previous record for the session is replaced.
        """
        now = self._clock()
        handle = session_handle or generate_session_handle(now)
        record = TokenRecord(
            token_base=generate_secure_random(self._props.token_bytes),
            secret=generate_secure_random(self._props.secret_bytes),
            expires_at=now + self._props.token_expiry,
            created_at=now,
            bound_origin=origin or None,
        )
        signature = self._signer.sign(record.secret, record.signed_message(handle))
        await self._store.set(handle, record)

        logger.debug("Issued CSRF token for session %s (origin=%s)", handle, record.bound_origin)
        return IssuedToken(
            token=f"{record.token_base}{TOKEN_SEPARATOR}{signature}",
            session_handle=handle,
            expires_in=self._props.token_expiry,
        )
