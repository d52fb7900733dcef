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
"""CSRF configuration properties (formshield.csrf.*)."""

from __future__ import annotations

from dataclasses import dataclass, field

from formshield.core.config import config_properties


@config_properties(prefix="formshield.csrf")
@dataclass
class CsrfProperties:
    """Settings for token issuance, storage and the web adapters.

    Durations are in seconds; byte lengths are the number of random bytes
    drawn before hex encoding.
    """

    token_expiry: int = 3600
    max_size: int = 10_000
    sweep_interval: int = 300
    token_bytes: int = 32
    secret_bytes: int = 32
    rotation_header: str = "X-New-CSRF-Token"
    cookie_name: str = "_csrf"
    cookie_secure: bool = True
    token_path: str = "/api/csrf"
    expose_stats: bool = False
    excluded_paths: list[str] = field(
        default_factory=lambda: ["/api/csrf", "/api/health", "/api/metrics", "/favicon.ico"]
    )

    def __post_init__(self) -> None:
        if self.token_expiry <= 0:
            raise ValueError(f"token_expiry must be positive, got {self.token_expiry}")
        if self.max_size <= 0:
            raise ValueError(f"max_size must be positive, got {self.max_size}")
        if self.sweep_interval <= 0:
            raise ValueError(f"sweep_interval must be positive, got {self.sweep_interval}")
        if self.token_bytes < 16 or self.secret_bytes < 16:
            raise ValueError("token_bytes and secret_bytes must be at least 16")
