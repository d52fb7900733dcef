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
"""Random values and HMAC-SHA256 signing for CSRF tokens.

Signing is a strategy: :class:`CryptographyHmacSigner` is preferred and
:class:`StdlibHmacSigner` takes over if it fails. :class:`FallbackHmacSigner`
combines the two and switches permanently on the first failure. Both
produce lowercase hex digests, so token shape does not depend on which
backend signed it.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from typing import Protocol, runtime_checkable

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.hmac import HMAC

from formshield.kernel.exceptions import SigningUnavailableException

logger = logging.getLogger(__name__)

ALGORITHM = "HMAC-SHA256"


def generate_secure_random(num_bytes: int) -> str:
    """Return *num_bytes* of CSPRNG output as a hex string."""
    return secrets.token_hex(num_bytes)


def constant_time_equals(a: str, b: str) -> bool:
    """Timing-safe string comparison that accepts any unicode input."""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


@runtime_checkable
class HmacSigner(Protocol):
    """Port for producing hex HMAC-SHA256 signatures."""

    name: str

    def sign(self, secret: str, message: str) -> str:
        """Sign *message* with *secret*. Returns a lowercase hex digest."""
        ...


class CryptographyHmacSigner:
    """HmacSigner backed by the ``cryptography`` package."""

    name = "cryptography"

    def sign(self, secret: str, message: str) -> str:
        mac = HMAC(secret.encode("utf-8"), hashes.SHA256())
        mac.update(message.encode("utf-8"))
        return mac.finalize().hex()


class StdlibHmacSigner:
    """HmacSigner backed by the standard library ``hmac`` module."""

    name = "stdlib"

    def sign(self, secret: str, message: str) -> str:
        return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


class FallbackHmacSigner:
    """Uses *preferred* until it fails once, then *fallback* from then on.

    Raises:
        SigningUnavailableException: if the fallback fails as well.
    """

    def __init__(
        self,
        preferred: HmacSigner | None = None,
        fallback: HmacSigner | None = None,
    ) -> None:
        self._preferred: HmacSigner | None = preferred or CryptographyHmacSigner()
        self._fallback: HmacSigner = fallback or StdlibHmacSigner()

    @property
    def name(self) -> str:
        return self.active.name

    @property
    def active(self) -> HmacSigner:
        """The backend that will sign the next message."""
        return self._preferred or self._fallback

    def sign(self, secret: str, message: str) -> str:
        if self._preferred is not None:
            try:
                return self._preferred.sign(secret, message)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "HMAC backend %s failed (%s), falling back to %s",
                    self._preferred.name,
                    exc,
                    self._fallback.name,
                )
                self._preferred = None
        try:
            return self._fallback.sign(secret, message)
        except Exception as exc:
            raise SigningUnavailableException(
                "No HMAC backend available",
                code="CSRF_SIGNING_UNAVAILABLE",
                context={"backend": self._fallback.name},
            ) from exc

    def verify(self, secret: str, message: str, signature: str) -> bool:
        """Recompute the signature for *message* and compare in constant time."""
        return constant_time_equals(self.sign(secret, message), signature)
