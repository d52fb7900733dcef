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
"""Starlette adapter -- CSRF token issuance, validation and statistics routes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from formshield.security.csrf.headers import HOST_HEADER, ORIGIN_HEADER, session_from_headers
from formshield.security.csrf.origin import origin_hostname, validate_origin
from formshield.security.csrf.service import CsrfProtection
from formshield.security.csrf.signing import ALGORITHM
from formshield.web.adapters.starlette.filters.csrf_filter import (
    SESSION_RESPONSE_HEADER,
    set_csrf_cookie,
)

TOKEN_VERSION = "2.0"

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _now() -> str:
    return datetime.now(UTC).isoformat()


class CsrfRouteBuilder:
    """Builds the token endpoint routes at ``CsrfProperties.token_path``.

    * ``GET`` issues a token for a same-origin caller.
    * ``POST`` validates ``{"token", "sessionId"}`` from a JSON body.
    * ``OPTIONS`` reports store statistics when ``expose_stats`` is enabled.
    """

    def __init__(self, csrf: CsrfProtection) -> None:
        self._csrf = csrf

    def build_routes(self) -> list[Route]:
        path = self._csrf.properties.token_path
        return [
            Route(path, self._handle_issue, methods=["GET"]),
            Route(path, self._handle_validate, methods=["POST"]),
            Route(path, self._handle_stats, methods=["OPTIONS"]),
        ]

    async def _handle_issue(self, request: Request) -> Response:
        origin = request.headers.get(ORIGIN_HEADER) or f"{request.url.scheme}://{request.url.netloc}"
        host = request.headers.get(HOST_HEADER)

        if host:
            if origin_hostname(origin) is None:
                return JSONResponse({"error": "Invalid origin header"}, status_code=400)
            if not validate_origin(origin, host):
                return JSONResponse({"error": "Cross-origin requests not allowed"}, status_code=403)

        issued = await self._csrf.issue(
            session_from_headers(request.headers, include_trace=True), origin
        )

        response = JSONResponse(
            {
                "token": issued.token,
                "sessionId": issued.session_handle,
                "expiresIn": issued.expires_in,
                "algorithm": ALGORITHM,
                "version": TOKEN_VERSION,
                "issued": _now(),
            },
            headers={
                **_NO_CACHE_HEADERS,
                SESSION_RESPONSE_HEADER: issued.session_handle,
                "X-CSRF-Version": TOKEN_VERSION,
            },
        )
        set_csrf_cookie(response, self._csrf, self._csrf.generate_cookie_value())
        return response

    async def _handle_validate(self, request: Request) -> Response:
        try:
            body: Any = await request.json()
        except ValueError:
            return JSONResponse(
                {"valid": False, "error": "Validation failed", "code": "CSRF_VALIDATION_ERROR"},
                status_code=400,
            )

        token = body.get("token") if isinstance(body, dict) else None
        session_id = body.get("sessionId") if isinstance(body, dict) else None
        if not token or not session_id:
            return JSONResponse({"valid": False, "error": "Missing token or sessionId"}, status_code=400)

        result = await self._csrf.validate(
            str(token),
            str(session_id),
            origin=request.headers.get(ORIGIN_HEADER),
            host=request.headers.get(HOST_HEADER),
        )
        return JSONResponse(
            {
                "valid": result.valid,
                "error": result.error,
                "newToken": result.new_token,
                "newSessionId": result.new_session_handle,
                "timestamp": _now(),
            }
        )

    async def _handle_stats(self, request: Request) -> Response:
        props = self._csrf.properties
        if not props.expose_stats:
            return Response(status_code=404)

        return JSONResponse(
            {
                **self._csrf.stats(),
                "config": {
                    "tokenExpiry": props.token_expiry,
                    "maxSize": props.max_size,
                    "cookieName": props.cookie_name,
                    "rotationHeader": props.rotation_header,
                    "signer": self._csrf.signer.name,
                },
                "timestamp": _now(),
            }
        )
