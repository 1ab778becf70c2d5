# Copyright 2026 castline.fm
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

"""Tests for structlog configuration."""

import json
import logging

import pytest
import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer

from castline.logging import _build_processors, _cloudwatch_processor, configure_structlog, get_log_format, get_log_level


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestEnvironment:
    @pytest.mark.parametrize("value,expected", [("json", "json"), ("CloudWatch", "cloudwatch"), ("bogus", "json")])
    def test_log_format(self, monkeypatch, value, expected):
        monkeypatch.setenv("LOG_FORMAT", value)

        assert get_log_format() == expected

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert get_log_level() == logging.DEBUG

    def test_unknown_log_level_defaults_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        assert get_log_level() == logging.INFO


class TestProcessors:
    def test_console_renderer(self):
        assert isinstance(_build_processors("console")[-1], ConsoleRenderer)

    def test_json_renderer(self):
        processors = _build_processors("cloudwatch")

        assert isinstance(processors[-1], JSONRenderer)
        assert _cloudwatch_processor in processors

    def test_cloudwatch_field_names(self):
        event = _cloudwatch_processor(None, "info", {"event": "hi", "timestamp": "t", "level": "info"})

        assert event == {"message": "hi", "@timestamp": "t", "level": "INFO"}


class TestConfigure:
    def test_json_output_carries_bound_context(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.delenv("LOG_FILE", raising=False)
        configure_structlog()

        structlog.contextvars.bind_contextvars(request_id="abc")
        try:
            structlog.get_logger("test").info("podcast_created", podcast_id="p1")
        finally:
            structlog.contextvars.clear_contextvars()

        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "podcast_created"
        assert line["request_id"] == "abc"
        assert line["podcast_id"] == "p1"
