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
"""Tests for StructlogAdapter — default LoggingPort implementation."""

import logging

from formshield.core.config import Config
from formshield.logging import configure_logging
from formshield.logging.port import LoggingPort
from formshield.logging.structlog_adapter import StructlogAdapter


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        adapter = StructlogAdapter()
        assert isinstance(adapter, LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        config = Config({"formshield": {"logging": {"level": {"root": "debug"}}}})
        adapter.configure(config)
        assert adapter._root_level == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_reads_format(self):
        adapter = StructlogAdapter()
        config = Config({"formshield": {"logging": {"format": "json"}}})
        adapter.configure(config)
        assert adapter._format == "json"

    def test_configure_reads_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config(
            {"formshield": {"logging": {"level": {"root": "INFO", "formshield.security": "WARNING"}}}}
        )
        adapter.configure(config)
        assert adapter._module_levels == {"formshield.security": "WARNING"}
        assert logging.getLogger("formshield.security").level == logging.WARNING

    def test_configure_replaces_root_handlers(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        adapter.configure(Config({}))
        assert len(logging.getLogger().handlers) == 1


class TestStructlogAdapterSetLevel:
    def test_set_level_updates_module_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        adapter.set_level("formshield.store", "DEBUG")
        assert logging.getLogger("formshield.store").level == logging.DEBUG


class RecordingPort:
    """Minimal LoggingPort that remembers how it was configured."""

    def __init__(self):
        self.configured_with = None
        self.levels = {}

    def configure(self, config):
        self.configured_with = config

    def set_level(self, name, level):
        self.levels[name] = level


class TestConfigureLogging:
    def test_returns_configured_adapter(self):
        adapter = configure_logging(Config({"formshield": {"logging": {"format": "json"}}}))
        assert isinstance(adapter, StructlogAdapter)
        assert adapter._format == "json"

    def test_stdlib_records_are_rendered(self, capsys):
        configure_logging(Config({"formshield": {"logging": {"format": "json"}}}))
        logging.getLogger("formshield.security.csrf").warning("CSRF validation failed")
        out = capsys.readouterr().out
        assert "CSRF validation failed" in out
        assert '"level": "warning"' in out

    def test_configures_given_port(self):
        port = RecordingPort()
        config = Config({"formshield": {"logging": {"format": "json"}}})

        result = configure_logging(config, port)

        assert result is port
        assert isinstance(port, LoggingPort)
        assert port.configured_with is config

    def test_create_app_configures_logging_port(self):
        from formshield.web.adapters.starlette import create_app

        port = RecordingPort()
        config = Config({})

        create_app(config, logging_port=port)

        assert port.configured_with is config

