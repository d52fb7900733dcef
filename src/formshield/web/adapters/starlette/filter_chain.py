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
"""WebFilterChainMiddleware — runs formshield filters as pure ASGI middleware."""

from __future__ import annotations

from collections.abc import Sequence

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from formshield.web.filters import WebFilter


class _ResponseCapture:
    """ASGI ``send`` target that records a downstream response."""

    def __init__(self) -> None:
        self.status = 200
        self.headers: list[tuple[bytes, bytes]] = []
        self.body = bytearray()

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")

    def to_response(self) -> Response:
        response = Response(content=bytes(self.body), status_code=self.status)
        response.raw_headers[:] = self.headers
        return response


class WebFilterChainMiddleware:
    """Runs *filters* in order around the wrapped application.

    Filters whose ``should_not_filter()`` is true are skipped. The route
    handler's response is buffered so filters can still add headers and
    cookies after ``call_next`` returns.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = tuple(filters)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._filters:
            await self.app(scope, receive, send)
            return

        async def downstream() -> Response:
            capture = _ResponseCapture()
            await self.app(scope, receive, capture.send)
            return capture.to_response()

        async def dispatch(request: Request, index: int) -> Response:
            for position in range(index, len(self._filters)):
                web_filter = self._filters[position]
                if web_filter.should_not_filter(request):
                    continue

                async def call_next(req: Request, _next: int = position + 1) -> Response:
                    return await dispatch(req, _next)

                response: Response = await web_filter.do_filter(request, call_next)
                return response
            return await downstream()

        response = await dispatch(Request(scope, receive, send), 0)
        await response(scope, receive, send)
