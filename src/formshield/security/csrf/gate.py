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
"""CsrfRequestGate — decides whether an inbound request may proceed."""

from __future__ import annotations

from typing import Any

from formshield.security.csrf.headers import (
    HOST_HEADER,
    ORIGIN_HEADER,
    get_header,
    session_from_headers,
    token_from_headers,
)
from formshield.security.csrf.types import GateResult
from formshield.security.csrf.validator import CsrfTokenValidator

SAFE_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
"""HTTP methods that do not require CSRF validation."""

ROTATION_HEADER = "X-New-CSRF-Token"


class CsrfRequestGate:
    """Transport-agnostic CSRF check for a request-like object.

    The request only needs ``method`` and a ``headers`` mapping. Safe methods
    bypass validation; everything else must carry a valid token and session
    handle. Mapping a failure to an HTTP status is left to the caller.
    """

    def __init__(self, validator: CsrfTokenValidator, rotation_header: str = ROTATION_HEADER) -> None:
        self._validator = validator
        self._rotation_header = rotation_header

    async def check(self, request: Any) -> GateResult:
        if request.method.upper() in SAFE_METHODS:
            return GateResult(valid=True)

        headers = request.headers
        result = await self._validator.validate(
            token_from_headers(headers),
            session_from_headers(headers),
            origin=get_header(headers, ORIGIN_HEADER),
            host=get_header(headers, HOST_HEADER),
        )

        new_headers: dict[str, str] = {}
        if result.valid and result.new_token:
            new_headers[self._rotation_header] = result.new_token
        return GateResult(
            valid=result.valid,
            error=result.error,
            new_headers=new_headers,
            new_session_handle=result.new_session_handle,
        )
