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
"""CsrfProtection — wires store, issuer, validator and gate together."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from formshield.security.csrf.adapters.memory import InMemoryCsrfTokenStore
from formshield.security.csrf.double_submit import generate_cookie_value, validate_double_submit
from formshield.security.csrf.gate import CsrfRequestGate
from formshield.security.csrf.issuer import CsrfTokenIssuer
from formshield.security.csrf.properties import CsrfProperties
from formshield.security.csrf.signing import FallbackHmacSigner
from formshield.security.csrf.types import GateResult, IssuedToken, ValidationResult
from formshield.security.csrf.validator import CsrfTokenValidator

logger = logging.getLogger(__name__)


class CsrfProtection:
    """Service object owning one token store and everything that uses it.

    Each instance is fully isolated, so tests can build their own. Call
    :meth:`start` to begin the background sweep and :meth:`stop` on
    shutdown; ``async with`` does both.

    Usage::

        csrf = CsrfProtection(CsrfProperties(token_expiry=1800))
        async with csrf:
            issued = await csrf.issue()
            result = await csrf.validate(issued.token, issued.session_handle)
    """

    def __init__(
        self,
        properties: CsrfProperties | None = None,
        *,
        signer: FallbackHmacSigner | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.properties = properties or CsrfProperties()
        self.signer = signer or FallbackHmacSigner()
        self.store = InMemoryCsrfTokenStore(
            max_size=self.properties.max_size,
            sweep_interval=self.properties.sweep_interval,
            clock=clock,
        )
        self.issuer = CsrfTokenIssuer(self.store, self.properties, self.signer, clock)
        self.validator = CsrfTokenValidator(self.store, self.issuer, self.signer)
        self.gate = CsrfRequestGate(self.validator, self.properties.rotation_header)

    async def start(self) -> None:
        await self.store.start()
        logger.info(
            "CSRF protection started (expiry=%ss, max_size=%d, sweep=%ss, signer=%s)",
            self.properties.token_expiry,
            self.properties.max_size,
            self.properties.sweep_interval,
            self.signer.name,
        )

    async def stop(self) -> None:
        await self.store.stop()
        logger.info("CSRF protection stopped")

    async def __aenter__(self) -> CsrfProtection:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def issue(self, session_handle: str | None = None, origin: str | None = None) -> IssuedToken:
        return await self.issuer.issue(session_handle, origin)

    async def validate(
        self,
        token: str | None,
        session_handle: str | None = None,
        *,
        origin: str | None = None,
        host: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        return await self.validator.validate(
            token, session_handle, origin=origin, host=host, headers=headers
        )

    async def check(self, request: Any) -> GateResult:
        return await self.gate.check(request)

    def generate_cookie_value(self) -> str:
        return generate_cookie_value(self.properties.token_bytes)

    @staticmethod
    def validate_double_submit(submitted: str, cookie_value: str) -> bool:
        return validate_double_submit(submitted, cookie_value)

    async def clear(self) -> None:
        """Drop every stored token (tests and shutdown)."""
        await self.store.clear()

    def stats(self) -> dict[str, Any]:
        return self.store.stats()
