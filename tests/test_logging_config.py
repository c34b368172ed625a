"""Tests for provisioner logging setup."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from provisioner.logging_config import JSONFormatter, StepContextFilter, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    saved_level = root.level
    saved_handlers = root.handlers[:]
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.setLevel(saved_level)
    root.handlers = saved_handlers


def _record(msg="Running step", args=(), level=logging.INFO, step=None, exc_info=None):
    record = logging.LogRecord(
        name="provisioner.orchestrator.pipeline", level=level, pathname="pipeline.py",
        lineno=1, msg=msg, args=args, exc_info=exc_info,
    )
    if step is not None:
        record.step = step
    return record


class TestConfigureLogging:
    def test_console_handler_carries_step_filter(self):
        with patch.dict(os.environ, {}, clear=True):
            configure_logging()
        [handler] = logging.getLogger().handlers
        assert logging.getLogger().level == logging.INFO
        assert any(isinstance(f, StepContextFilter) for f in handler.filters)

    def test_override_beats_environment(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}, clear=True):
            configure_logging(level_override="debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_json_lines_on_request(self):
        with patch.dict(os.environ, {"LOG_FORMAT": "JSON"}, clear=True):
            configure_logging()
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_log_file_keeps_debug_output(self, tmp_path):
        log_file = tmp_path / "provision.log"
        env = {"LOG_FILE": str(log_file), "LOG_LEVEL": "WARNING"}
        with patch.dict(os.environ, env, clear=True):
            configure_logging()

        root = logging.getLogger()
        console, file_handler = root.handlers
        assert console.level == logging.WARNING
        assert file_handler.level == logging.DEBUG
        assert root.level == logging.DEBUG

        logging.getLogger("provisioner.system.runner").debug("Output of make:\nok")
        file_handler.flush()
        assert "Output of make" in log_file.read_text(encoding="utf-8")

    def test_download_loggers_quieted(self):
        with patch.dict(os.environ, {}, clear=True):
            configure_logging()
        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("urllib.request").level == logging.WARNING


class TestJSONFormatter:
    def test_step_scoped_record(self):
        data = json.loads(JSONFormatter().format(
            _record("Step '%s' succeeded", args=("jasper",), step="jasper")
        ))
        assert data["step"] == "jasper"
        assert data["message"] == "Step 'jasper' succeeded"
        assert data["logger"] == "provisioner.orchestrator.pipeline"
        assert data["timestamp"].endswith("+00:00")

    def test_unscoped_record_omits_step(self):
        record = _record()
        StepContextFilter().filter(record)
        data = json.loads(JSONFormatter().format(record))
        assert "step" not in data
        assert "exception" not in data

    def test_failed_step_traceback(self):
        try:
            raise RuntimeError("cmake --build failed")
        except RuntimeError:
            import sys
            exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(
            _record("Step '%s' failed", args=("opencv",), level=logging.ERROR,
                    step="opencv", exc_info=exc_info)
        ))
        assert data["level"] == "ERROR"
        assert "RuntimeError: cmake --build failed" in data["exception"]


class TestStepContextFilter:
    def test_defaults_missing_step(self):
        record = _record()
        assert StepContextFilter().filter(record) is True
        assert record.step == "-"

    def test_keeps_existing_step(self):
        record = _record(step="opencv")
        StepContextFilter().filter(record)
        assert record.step == "opencv"
