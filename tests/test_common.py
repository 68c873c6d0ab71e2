"""
Tests for common module (error hierarchy and logging).
"""

import json
import logging
import pytest


class TestExceptions:
    """Tests for exception hierarchy."""

    def test_store_error_basic(self):
        from jarstore.common.exceptions import StoreError

        error = StoreError("Something failed")
        assert str(error) == "[StoreError] Something failed"
        assert error.recoverable is True

    def test_store_error_to_dict(self):
        from jarstore.common.exceptions import StoreError

        error = StoreError("Test", code="TEST", details={"key": 1})
        d = error.to_dict()

        assert d["error"] == "TEST"
        assert d["message"] == "Test"
        assert d["details"]["key"] == 1

    def test_install_errors_share_base(self):
        from jarstore.common.exceptions import (
            DownloadFailed, InstallError, SelfUpdateCompileFailed, StoreError, WriteFailed,
        )

        for error in (
            DownloadFailed("Weather", "u1", "HTTP 404"),
            WriteFailed("Weather", "/x", "disk full"),
            SelfUpdateCompileFailed("src/app.py", "SyntaxError"),
        ):
            assert isinstance(error, InstallError)
            assert isinstance(error, StoreError)

    def test_compile_failure_carries_output(self):
        from jarstore.common.exceptions import SelfUpdateCompileFailed

        error = SelfUpdateCompileFailed("src/app.py", "line 3: SyntaxError")
        assert error.output == "line 3: SyntaxError"
        assert error.code == "SELF_UPDATE_COMPILE_FAILED"

    def test_cause_in_str(self):
        from jarstore.common.exceptions import LaunchError

        error = LaunchError("a.jar", "runtime not found", cause=FileNotFoundError("java"))
        assert "caused by: java" in str(error)


class TestLogging:
    """Tests for logging helpers."""

    def test_json_formatter(self):
        from jarstore.common.logging_config import JSONFormatter

        record = logging.LogRecord("jarstore.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        record.extra_data = {"app": "Weather"}
        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "hello x"
        assert data["level"] == "INFO"
        assert data["data"] == {"app": "Weather"}

    def test_colored_formatter_restores_levelname(self):
        from jarstore.common.logging_config import ColoredFormatter

        record = logging.LogRecord("jarstore.test", logging.WARNING, __file__, 1, "msg", (), None)
        text = ColoredFormatter("%(levelname)s %(message)s").format(record)

        assert "\033[33m" in text
        assert record.levelname == "WARNING"

    def test_log_context(self):
        from jarstore.common.logging_config import LogContext

        factory = logging.getLogRecordFactory()
        with LogContext(app="Weather", operation="install"):
            record = logging.getLogRecordFactory()("n", logging.INFO, "f", 1, "m", (), None)
            assert record.extra_data == {"app": "Weather", "operation": "install"}
        assert logging.getLogRecordFactory() is factory

    def test_setup_logging_file(self, tmp_path):
        from jarstore.common.logging_config import setup_logging

        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            setup_logging(level=logging.WARNING, log_dir=tmp_path, json_logs=True)
            logging.getLogger("jarstore.test").debug("to file only")
            for handler in root.handlers:
                handler.flush()
            line = (tmp_path / "jarstore.log").read_text().strip()
            assert json.loads(line)["message"] == "to file only"
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
