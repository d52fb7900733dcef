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
"""Exception hierarchy for formshield.

A rejected token is not an exception: the validator and request gate
return structured results. Exceptions are reserved for failures of the
primitives those components depend on.
"""

from __future__ import annotations


class FormShieldException(Exception):
    """Base exception for all formshield errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CSRF_SIGNING_UNAVAILABLE").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class InfrastructureException(FormShieldException):
    """A backing primitive (signing, storage) could not do its job."""


class SigningUnavailableException(InfrastructureException):
    """No signing backend was able to produce a signature."""
