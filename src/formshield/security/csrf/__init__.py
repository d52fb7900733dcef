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
"""Session-bound CSRF tokens.

Tokens have the form ``{token_base}.{hmac}``; the HMAC covers the token
base, session handle and bound origin and is keyed by a per-token secret
that never leaves the server. Each token is valid once and is rotated on
successful validation. A stateless double-submit helper is also provided.
"""

from formshield.security.csrf.adapters.memory import InMemoryCsrfTokenStore
from formshield.security.csrf.double_submit import generate_cookie_value, validate_double_submit
from formshield.security.csrf.gate import ROTATION_HEADER, SAFE_METHODS, CsrfRequestGate
from formshield.security.csrf.issuer import CsrfTokenIssuer, generate_session_handle
from formshield.security.csrf.origin import validate_origin
from formshield.security.csrf.ports.outbound import CsrfTokenStore
from formshield.security.csrf.properties import CsrfProperties
from formshield.security.csrf.service import CsrfProtection
from formshield.security.csrf.signing import (
    CryptographyHmacSigner,
    FallbackHmacSigner,
    HmacSigner,
    StdlibHmacSigner,
)
from formshield.security.csrf.types import GateResult, IssuedToken, TokenRecord, ValidationResult
from formshield.security.csrf.validator import CsrfTokenValidator

__all__ = [
    "ROTATION_HEADER",
    "SAFE_METHODS",
    "CryptographyHmacSigner",
    "CsrfProperties",
    "CsrfProtection",
    "CsrfRequestGate",
    "CsrfTokenIssuer",
    "CsrfTokenStore",
    "CsrfTokenValidator",
    "FallbackHmacSigner",
    "GateResult",
    "HmacSigner",
    "InMemoryCsrfTokenStore",
    "IssuedToken",
    "StdlibHmacSigner",
    "TokenRecord",
    "ValidationResult",
    "generate_cookie_value",
    "generate_session_handle",
    "validate_double_submit",
    "validate_origin",
]
