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
"""formshield web application factory built on Starlette."""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator, Sequence

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import Route

from formshield.core.config import Config
from formshield.logging.port import LoggingPort
from formshield.logging.structlog_adapter import configure_logging
from formshield.security.csrf.properties import CsrfProperties
from formshield.security.csrf.service import CsrfProtection
from formshield.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from formshield.web.adapters.starlette.filters import CsrfFilter
from formshield.web.adapters.starlette.routes import CsrfRouteBuilder
from formshield.web.filters import WebFilter


def create_app(
    config: Config | None = None,
    *,
    csrf: CsrfProtection | None = None,
    extra_routes: Sequence[Route] = (),
    extra_filters: Sequence[WebFilter] = (),
    debug: bool = False,
    setup_logging: bool = False,
    logging_port: LoggingPort | None = None,
) -> Starlette:
    """Create a Starlette application protected by :class:`CsrfFilter`.

    Includes:
    - Token routes at ``formshield.csrf.token_path``
    - WebFilter chain: CSRF filter first, then *extra_filters*
    - Lifespan that starts and stops the token store sweep

    With *setup_logging* (or an explicit *logging_port*) logging is configured
    from ``formshield.logging.*``; structlog is used unless a port is given.
    The :class:`CsrfProtection` service is exposed as ``app.state.csrf``.
    """
    config = config or Config()
    if setup_logging or logging_port is not None:
        configure_logging(config, logging_port)

    if csrf is None:
        csrf = CsrfProtection(config.bind(CsrfProperties))

    filters: list[WebFilter] = [CsrfFilter(csrf), *extra_filters]

    routes: list[Route] = CsrfRouteBuilder(csrf).build_routes()
    routes.extend(extra_routes)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        await csrf.start()
        try:
            yield
        finally:
            await csrf.stop()

    app = Starlette(
        debug=debug,
        routes=routes,
        middleware=[Middleware(WebFilterChainMiddleware, filters=filters)],
        lifespan=lifespan,
    )
    app.state.csrf = csrf
    return app
