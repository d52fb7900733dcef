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
"""CSRF filters for Starlette.

* :class:`CsrfFilter` — session-bound, HMAC-signed tokens via
  :class:`~formshield.security.csrf.gate.CsrfRequestGate`.
* :class:`DoubleSubmitCsrfFilter` — the stateless `double-submit cookie`_
  pattern.

.. _double-submit cookie:
   https://cheatsheetseries.owasp.org/cheatsheets/Cross-Site_Request_Forgery_Prevention_Cheat_Sheet.html#double-submit-cookie
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.responses import JSONResponse

from formshield.security.csrf.double_submit import (
    CSRF_COOKIE_NAME,
    CSRF_HEADER_NAME,
    generate_cookie_value,
    validate_double_submit,
)
from formshield.security.csrf.gate import SAFE_METHODS
from formshield.security.csrf.headers import (
    HOST_HEADER,
    ORIGIN_HEADER,
    TOKEN_HEADERS,
    get_header,
)
from formshield.security.csrf.origin import validate_origin
from formshield.security.csrf.service import CsrfProtection
from formshield.web.filters import CallNext, PathExcludingFilter

logger = logging.getLogger(__name__)

SESSION_RESPONSE_HEADER = "X-Session-ID"


def csrf_rejection(message: str | None) -> JSONResponse:
    """Build the 403 response returned for a failed CSRF check."""
    return JSONResponse(
        {
            "error": "CSRF validation failed",
            "code": "CSRF_TOKEN_INVALID",
            "message": message or "Invalid or missing CSRF token",
        },
        status_code=403,
    )


def set_csrf_cookie(response: Any, csrf: CsrfProtection, value: str) -> None:
    """Set the double-submit cookie configured on *csrf* on *response*."""
    props = csrf.properties
    response.set_cookie(
        key=props.cookie_name,
        value=value,
        max_age=props.token_expiry,
        httponly=True,
        samesite="lax",
        secure=props.cookie_secure,
        path="/",
    )


class CsrfFilter(PathExcludingFilter):
    """Session-bound CSRF protection.

    * **Safe methods** pass through. When the request is same-origin, a
      token bound to that origin is issued under a fresh session and returned in the
      ``X-CSRF-Token`` and ``X-Session-ID`` response headers, together with
      a double-submit cookie.
    * **Unsafe methods** must present a valid token and session handle.
      Failures get a 403 JSON response; on success the rotated token and its
      new session handle are added to the response headers.

    Paths listed in ``CsrfProperties.excluded_paths`` (prefix match) are
    skipped.
    """

    def __init__(self, csrf: CsrfProtection, exclude_patterns: list[str] | None = None) -> None:
        self._csrf = csrf
        if exclude_patterns is None:
            exclude_patterns = [f"{path}*" for path in csrf.properties.excluded_paths]
        self.exclude_patterns = exclude_patterns

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        result = await self._csrf.check(request)

        if result.new_headers is None:
            response = await call_next(request)
            await self._attach_token(request, response)
            return response

        if not result.valid:
            logger.warning(
                "CSRF validation failed: path=%s method=%s error=%s origin=%s",
                request.url.path,
                request.method,
                result.error,
                get_header(request.headers, ORIGIN_HEADER),
            )
            return csrf_rejection(result.error)

        response = await call_next(request)
        response.headers.update(result.new_headers)
        if result.new_session_handle:
            response.headers[SESSION_RESPONSE_HEADER] = result.new_session_handle
        return response

    async def _attach_token(self, request: Any, response: Any) -> None:
        origin = get_header(request.headers, ORIGIN_HEADER)
        host = get_header(request.headers, HOST_HEADER)
        if not validate_origin(origin, host):
            return

        # Always a fresh session; a supplied X-Session-ID may still hold a live token.
        issued = await self._csrf.issue(None, origin)
        response.headers[TOKEN_HEADERS[0]] = issued.token
        response.headers[SESSION_RESPONSE_HEADER] = issued.session_handle
        set_csrf_cookie(response, self._csrf, self._csrf.generate_cookie_value())


def _set_double_submit_cookie(response: Any, token: str, secure: bool) -> None:
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=False,  # JS must be able to read the token
        samesite="lax",
        secure=secure,
        path="/",
    )


class DoubleSubmitCsrfFilter(PathExcludingFilter):
    """Stateless double-submit cookie filter.

    Safe methods refresh the ``XSRF-TOKEN`` cookie. Unsafe methods must echo
    the cookie value in ``X-XSRF-TOKEN``. Requests carrying an
    ``Authorization: Bearer`` header are API clients and are exempt.

    Args:
        cookie_secure: Sets the ``Secure`` flag on the ``XSRF-TOKEN`` cookie.
        exclude_patterns: Path globs to skip; health and metrics by default.
    """

    def __init__(self, cookie_secure: bool = True, exclude_patterns: list[str] | None = None) -> None:
        self._cookie_secure = cookie_secure
        if exclude_patterns is None:
            exclude_patterns = ["/api/health*", "/api/metrics*"]
        self.exclude_patterns = exclude_patterns

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        if request.method.upper() in SAFE_METHODS:
            response = await call_next(request)
            _set_double_submit_cookie(response, generate_cookie_value(), self._cookie_secure)
            return response

        auth_header = get_header(request.headers, "Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            return await call_next(request)

        cookie_token: str | None = request.cookies.get(CSRF_COOKIE_NAME)
        header_token: str | None = request.headers.get(CSRF_HEADER_NAME)

        if not cookie_token or not header_token:
            return csrf_rejection("CSRF token missing")

        if not validate_double_submit(header_token, cookie_token):
            return csrf_rejection("CSRF token invalid")

        response = await call_next(request)
        _set_double_submit_cookie(response, generate_cookie_value(), self._cookie_secure)
        return response
